import asyncio
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable

from ..logger import get_logger
from .errors import (
    ArtifactNotFoundError,
    ConversionError,
    InvalidFilenameError,
    InvalidUploadError,
    UploadSaveError,
    UploadTooLargeError,
)
from .interfaces import ConverterGateway, StorageGateway, StoredUpload
from .retention import RetentionScheduler

logger = get_logger(__name__)

READ_CHUNK = 1024 * 1024


class ConversionService:
    """Core domain service for the upload → convert → download lifecycle.

    This service is framework-agnostic. The HTTP layer hands it filenames
    and an async chunk reader; storage, conversion and retention are
    delegated to gateways so each can be swapped in tests.
    """

    def __init__(
        self,
        storage: StorageGateway,
        converter: ConverterGateway,
        retention: RetentionScheduler,
        *,
        max_upload_bytes: int,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._storage = storage
        self._converter = converter
        self._retention = retention
        self._max_upload_bytes = max_upload_bytes
        self._clock = clock

    @property
    def storage(self) -> StorageGateway:
        return self._storage

    @property
    def retention(self) -> RetentionScheduler:
        return self._retention

    @property
    def max_upload_bytes(self) -> int:
        return self._max_upload_bytes

    async def start(self) -> None:
        self._storage.ensure_dirs()
        await self._retention.start()

    async def stop(self) -> None:
        await self._retention.stop()

    def check_upload_name(self, filename: str | None) -> str:
        if not filename:
            raise InvalidUploadError("Error retrieving file")
        if not filename.lower().endswith(self._storage.source_ext):
            raise InvalidUploadError("Only DOCX files are allowed")
        return filename

    async def save_upload(
        self,
        filename: str | None,
        reader: Callable[[int], Awaitable[bytes]],
    ) -> StoredUpload:
        """Stream an upload into the upload directory under a timestamped name.

        The extension is checked before anything touches the disk. A stream
        longer than the size limit is rejected and its partial file removed.
        """
        original_name = self.check_upload_name(filename)
        stored_name, artifact_name = self._storage.names_for(original_name, self._clock())
        path = self._storage.upload_path(stored_name)

        size_bytes = 0
        try:
            with path.open("wb") as f_out:
                while True:
                    chunk = await reader(READ_CHUNK)
                    if not chunk:
                        break
                    size_bytes += len(chunk)
                    if size_bytes > self._max_upload_bytes:
                        raise UploadTooLargeError("File too large")
                    f_out.write(chunk)
        except UploadTooLargeError:
            self._storage.remove(path)
            logger.warning(
                "Rejected '%s': larger than %d bytes", original_name, self._max_upload_bytes
            )
            raise
        except OSError as e:
            logger.exception("Could not save upload '%s' to %s", original_name, path)
            raise UploadSaveError("Error saving file") from e

        logger.info("Saved upload '%s' as %s (%d bytes)", original_name, stored_name, size_bytes)
        return StoredUpload(
            original_filename=original_name,
            stored_filename=stored_name,
            path=path,
            size_bytes=size_bytes,
            artifact_filename=artifact_name,
        )

    async def convert(self, upload: StoredUpload) -> str:
        """Convert a saved upload and return the artifact filename.

        The source file is deleted on success and left in place on failure.
        """
        output_path = self._storage.output_path(upload.artifact_filename)
        try:
            await asyncio.to_thread(self._converter.convert, str(upload.path), str(output_path))
        except ConversionError as e:
            logger.error("Conversion of %s failed at %s: %s", upload.stored_filename, e.stage, e)
            raise
        except Exception as e:
            logger.exception("Conversion of %s failed", upload.stored_filename)
            raise ConversionError("convert", str(e)) from e

        self._storage.remove(upload.path)
        logger.info("Converted %s -> %s", upload.stored_filename, upload.artifact_filename)
        return upload.artifact_filename

    async def convert_upload(
        self,
        filename: str | None,
        reader: Callable[[int], Awaitable[bytes]],
    ) -> str:
        upload = await self.save_upload(filename, reader)
        return await self.convert(upload)

    def resolve_artifact(self, filename: str) -> Path:
        """Map a download name to its artifact path.

        Names containing `..` or a path separator are rejected before any
        filesystem access.
        """
        if not filename:
            raise InvalidFilenameError("Filename required")
        if ".." in filename or "/" in filename or "\\" in filename:
            logger.warning("Rejected download name %r", filename)
            raise InvalidFilenameError("Invalid filename")
        path = self._storage.output_path(filename)
        if not path.is_file():
            raise ArtifactNotFoundError("File not found")
        return path

    def schedule_removal(self, path: Path) -> bool:
        return self._retention.schedule(path)
