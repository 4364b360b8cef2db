"""Custom exceptions for audioscribe."""

from __future__ import annotations

UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


class AudioscribeError(Exception):
    """Base exception for audioscribe."""

    pass


class JobValidationError(AudioscribeError):
    """Job creation input was rejected."""

    pass


class StorageError(AudioscribeError):
    """Storage operation failed."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class JobNotFoundError(StorageError):
    """No job exists with the requested id."""

    def __init__(self, job_id: str):
        super().__init__(f"Job with id {job_id} not found")
        self.job_id = job_id


class InvalidTransitionError(StorageError):
    """A status update would move a job backwards or out of a terminal state."""

    pass


class StorageInitializationError(StorageError):
    """Storage backend could not be opened."""

    pass


class FileDownloadError(AudioscribeError):
    """Fetching the remote audio file failed."""

    def __init__(self, message: str, code: str = "DOWNLOAD_FAILED"):
        super().__init__(message)
        self.code = code


class TranscriptionError(AudioscribeError):
    """Transcription API call failed."""

    def __init__(
        self,
        message: str,
        code: str = "API_ERROR",
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class FileTooLargeError(TranscriptionError):
    """Audio file exceeds the transcription API size limit."""

    def __init__(self, size: int, max_size: int):
        super().__init__(
            f"File size {size} bytes exceeds maximum size of {max_size} bytes",
            code="FILE_TOO_LARGE",
        )
        self.size = size
        self.max_size = max_size


class WebhookDeliveryError(AudioscribeError):
    """Webhook notification could not be delivered."""

    def __init__(
        self,
        message: str,
        code: str,
        webhook_url: str,
        attempt: int,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.webhook_url = webhook_url
        self.attempt = attempt
        self.status_code = status_code


def describe_error(exc: BaseException) -> str:
    """Convert an exception into the message stored on a failed job.

    Known failures keep their own message; anything else collapses to a
    generic message so internal details do not leak into job records.
    """
    if isinstance(exc, AudioscribeError):
        return str(exc) or type(exc).__name__
    return UNKNOWN_ERROR_MESSAGE
