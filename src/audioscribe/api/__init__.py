"""HTTP API for audioscribe."""
