"""
Error types raised by the transcription pipeline.

Every stage raises its own subclass of ``TranscriptionError``; the webhook
handler catches the base class and answers with a uniform HTTP 500.
"""


class ConfigError(Exception):
    """Raised when required environment configuration is missing or invalid."""


class TranscriptionError(Exception):
    """Base class for every failure between receiving a recording URL and a transcript."""


class FetchError(TranscriptionError):
    """The recording could not be fetched, or the fetch returned a non-OK status."""


class ReadError(TranscriptionError):
    """The recording response body could not be consumed."""


class EncodeError(TranscriptionError):
    """The speech request could not be serialized."""


class RequestError(TranscriptionError):
    """The HTTP call to the speech API failed."""


class DecodeError(TranscriptionError):
    """The speech API answered with a body that is not valid JSON."""


class UpstreamError(TranscriptionError):
    """
    The speech API reported an error in its response payload.

    Attributes:
        code (int): Error code from the payload.
        status (str): Symbolic status, e.g. ``INVALID_ARGUMENT``.
        message (str): Human-readable message from the API.
    """

    def __init__(self, code: int, status: str = "", message: str = ""):
        self.code = code
        self.status = status
        self.message = message
        super().__init__(f"speech API error: {code} {status} {message}")


class NoTranscriptError(TranscriptionError):
    """The speech API returned no results or no alternatives."""

    def __init__(self, message: str = "no transcriptions found"):
        super().__init__(message)
