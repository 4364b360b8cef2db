"""Collaborator services for audioscribe."""

from audioscribe.services.downloader import HttpFileDownloader
from audioscribe.services.webhook import WebhookClient
from audioscribe.services.whisper import WhisperClient

__all__ = ["HttpFileDownloader", "WebhookClient", "WhisperClient"]
