"""
Domain layer for DOCX to PDF conversion.
Provides interfaces (gateways), local adapters, retention scheduling and a
service that owns the upload → convert → download lifecycle, so front-ends
(HTTP or others) can use the same core logic.
"""

from .errors import (
    ArtifactNotFoundError,
    ConversionError,
    InvalidFilenameError,
    InvalidUploadError,
    ServiceError,
    UploadSaveError,
    UploadTooLargeError,
)
from .interfaces import ConverterGateway, DocumentEngine, StorageGateway, StoredUpload
from .retention import RetentionScheduler
from .service import ConversionService
