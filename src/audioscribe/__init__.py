"""audioscribe - asynchronous audio transcription jobs."""

__version__ = "0.1.0"
