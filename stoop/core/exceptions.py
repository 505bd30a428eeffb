"""
Stoop Politics exception hierarchy.

All application-specific exceptions inherit from StoopError,
enabling centralized error handling in the API middleware layer.
"""

from datetime import UTC, datetime


class StoopError(Exception):
    """Base exception for all Stoop Politics errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "STOOP_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class ValidationError(StoopError):
    """Raised when a request is missing required input."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, code="VALIDATION_ERROR", status_code=400)


class EpisodeNotFoundError(StoopError):
    """Raised when an episode ID does not exist."""

    def __init__(self, episode_id: int | str) -> None:
        super().__init__(
            detail=f"Episode not found: {episode_id}",
            code="EPISODE_NOT_FOUND",
            status_code=404,
        )


class TranscriptNodeNotFoundError(StoopError):
    """Raised when a transcript node ID does not exist."""

    def __init__(self, node_id: int | str) -> None:
        super().__init__(
            detail=f"Transcript node not found: {node_id}",
            code="NODE_NOT_FOUND",
            status_code=404,
        )


class InboxMessageNotFoundError(StoopError):
    """Raised when an inbox message ID does not exist."""

    def __init__(self, message_id: int | str) -> None:
        super().__init__(
            detail=f"Message not found: {message_id}",
            code="MESSAGE_NOT_FOUND",
            status_code=404,
        )


class EpisodeAlreadyPublishedError(StoopError):
    """Raised when publishing an episode that is already live."""

    def __init__(self, episode_id: int) -> None:
        super().__init__(
            detail=f"Episode {episode_id} is already published",
            code="ALREADY_PUBLISHED",
            status_code=409,
        )


class InvalidStateError(StoopError):
    """Raised on an illegal audio capture state transition."""

    def __init__(self, action: str, state: str) -> None:
        super().__init__(
            detail=f"Cannot {action} while {state}",
            code="INVALID_STATE",
            status_code=409,
        )


class PermissionDeniedError(StoopError):
    """Raised when microphone access is refused."""

    def __init__(
        self,
        detail: str = "Could not access microphone. Please allow microphone permissions.",
    ) -> None:
        super().__init__(detail=detail, code="PERMISSION_DENIED", status_code=403)


class InvalidFormatError(StoopError):
    """Raised when an uploaded file is not a recognised audio format."""

    def __init__(self, filename: str, content_type: str | None = None) -> None:
        super().__init__(
            detail=f"Unsupported audio file: {filename} ({content_type or 'unknown type'})",
            code="INVALID_FORMAT",
            status_code=415,
        )


class TooLargeError(StoopError):
    """Raised when an uploaded file exceeds the intake ceiling."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            detail=f"File too large: {size / 1024 / 1024:.1f} MB "
            f"(maximum {limit // (1024 * 1024)} MB)",
            code="TOO_LARGE",
            status_code=413,
        )


class PayloadTooLargeError(StoopError):
    """Raised when audio exceeds the transcription service payload limit."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            detail=f"Audio file too large. Maximum size is "
            f"{limit // (1024 * 1024)}MB for transcription (got {size / 1024 / 1024:.1f} MB).",
            code="PAYLOAD_TOO_LARGE",
            status_code=413,
        )


class UploadError(StoopError):
    """Raised when object storage rejects an upload."""

    def __init__(self, detail: str = "Upload failed") -> None:
        super().__init__(detail=detail, code="UPLOAD_ERROR", status_code=502)


class TranscriptionError(StoopError):
    """Raised when STT processing fails.

    ``code`` distinguishes the recognised failure kinds (invalid credential,
    quota exceeded, unsupported audio, timeout) from generic failures.
    """

    def __init__(
        self,
        detail: str = "Transcription failed",
        code: str = "TRANSCRIPTION_ERROR",
    ) -> None:
        super().__init__(detail=detail, code=code, status_code=500)
