from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol


class DocumentEngine(Protocol):
    """External document engine, consumed in three blocking steps."""

    def open(self, path: str) -> Any:
        ...

    def render(self, document: Any) -> Any:
        ...

    def write(self, rendered: Any, path: str) -> None:
        ...


class ConverterGateway(Protocol):
    def convert(self, input_path: str, output_path: str) -> None:
        """Convert the input file and write the result to output_path.
        This is a blocking call; callers should offload to threads if needed.
        """


class StorageGateway(Protocol):
    source_ext: str
    target_ext: str

    def ensure_dirs(self) -> None:
        ...

    def names_for(self, original_filename: str, when: datetime) -> tuple[str, str]:
        ...

    def upload_path(self, filename: str) -> Path:
        ...

    def output_path(self, filename: str) -> Path:
        ...

    def remove(self, path: Path) -> bool:
        ...


@dataclass(frozen=True)
class StoredUpload:
    original_filename: str
    stored_filename: str
    path: Path
    size_bytes: int
    artifact_filename: str
