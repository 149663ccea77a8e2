"""
Exception hierarchy for the conversion lifecycle.

Each exception carries the HTTP status the web layer should answer with, so
the service stays framework-agnostic while controllers map errors without a
lookup table.
"""


class ServiceError(Exception):
    """Root exception for upload, conversion and download failures."""

    status_code = 500


class InvalidUploadError(ServiceError):
    """Raised when the upload is missing or does not carry a .docx name."""

    status_code = 400


class UploadTooLargeError(ServiceError):
    """Raised when the uploaded stream exceeds the configured size limit."""

    status_code = 400


class UploadSaveError(ServiceError):
    """Raised when the upload cannot be written to the upload directory."""


class InvalidFilenameError(ServiceError):
    """Raised for empty download names or names that could leave the output directory."""

    status_code = 400


class ArtifactNotFoundError(ServiceError):
    status_code = 404


class ConversionError(ServiceError):
    """Raised when the conversion engine fails.

    `stage` names the engine step that failed (open, render or write); the
    engine's own exception is chained as `__cause__`.
    """

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(message)
        self.stage = stage
