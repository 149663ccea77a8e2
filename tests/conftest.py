"""
tests/conftest.py

Shared pytest fixtures available to all test modules.

The HTTP fixtures build a real app over temporary directories with a fake
converter and a fixed clock, so every test sees deterministic artifact names
and never touches the working directory.
"""

import io
from datetime import datetime
from pathlib import Path

import pytest
from docx import Document
from fastapi.testclient import TestClient

from docx_service.config import ServiceConfig
from docx_service.conversion import ConversionError
from docx_service.webapi import build_service, create_app

FIXED_NOW = datetime(2024, 1, 1, 10, 0, 0)
FAKE_PDF = b"%PDF-1.4\n% fake\n%%EOF\n"


class FakeConverter:
    """Writes a fixed PDF payload; set `fail_with` to simulate an engine failure."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.fail_with: ConversionError | None = None
        self.payload = FAKE_PDF

    def convert(self, input_path: str, output_path: str) -> None:
        self.calls.append((input_path, output_path))
        if self.fail_with is not None:
            raise self.fail_with
        Path(output_path).write_bytes(self.payload)


# ── Core fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture
def config(tmp_path: Path) -> ServiceConfig:
    return ServiceConfig(
        upload_dir=str(tmp_path / "uploads"),
        output_dir=str(tmp_path / "output"),
        max_file_size=1024,
        retention_delay=300.0,
    )


@pytest.fixture
def converter() -> FakeConverter:
    return FakeConverter()


@pytest.fixture
def service(config: ServiceConfig, converter: FakeConverter):
    return build_service(config, converter=converter, clock=lambda: FIXED_NOW)


@pytest.fixture
def client(config: ServiceConfig, service):
    """
    A TestClient over an app built from the temporary config.

    Entering the context runs the startup hook (directory creation) and the
    shutdown hook (retention tasks cancelled) around each test.
    """
    with TestClient(create_app(config, service), raise_server_exceptions=False) as c:
        yield c


# ── Sample file fixtures ───────────────────────────────────────────────────────

@pytest.fixture
def docx_upload():
    """Factory for (field, (filename, file_obj, content_type)) upload tuples."""

    def _make(filename: str = "report.docx", content: bytes = b"PK\x03\x04docx-bytes") -> tuple:
        return (
            "docx",
            (
                filename,
                io.BytesIO(content),
                "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            ),
        )

    return _make


@pytest.fixture
def sample_docx(tmp_path: Path) -> Path:
    """A real DOCX with a title, headings, styled runs, a bullet and a table."""
    doc = Document()
    doc.add_heading("Quarterly Report", level=0)
    doc.add_heading("Summary", level=1)
    para = doc.add_paragraph("Revenue grew ")
    para.add_run("12%").bold = True
    para.add_run(" against <forecast> & plan.").italic = True
    doc.add_paragraph("")
    doc.add_paragraph("First item", style="List Bullet")
    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Region"
    table.cell(0, 1).text = "Sales"
    table.cell(1, 0).text = "North"
    table.cell(1, 1).text = "42"
    path = tmp_path / "sample.docx"
    doc.save(str(path))
    return path
