"""Exceptions raised by backends, the synthesis client and voice lookup."""


class TTSError(Exception):
    """Base class for every cornfab synthesis failure.

    original_error keeps the underlying exception (httpx, SDK, ...) when
    there is one.
    """

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class TTSAuthError(TTSError):
    """A hosted backend is missing its API key or rejected it (401/403)."""


class TTSAPIError(TTSError):
    """A backend could not produce audio.

    Covers unreachable local containers, timeouts, rate limits (429),
    server errors and rejected requests. status_code is the HTTP status
    when the backend answered at all.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code


class VoiceNotFoundError(TTSError):
    """A custom:<name> voice has no reference file in the voices directory."""
