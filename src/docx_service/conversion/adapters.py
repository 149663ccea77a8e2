from datetime import datetime
from pathlib import Path
from typing import Any
from xml.sax.saxutils import escape

from docx import Document as open_docx
from docx.table import Table as DocxTable
from docx.text.hyperlink import Hyperlink
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import StyleSheet1, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Flowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..logger import get_logger
from .errors import ConversionError
from .interfaces import ConverterGateway, DocumentEngine, StorageGateway

logger = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DIR_MODE = 0o755


class LocalStorage(StorageGateway):
    def __init__(
        self,
        upload_dir: str,
        output_dir: str,
        *,
        source_ext: str = ".docx",
        target_ext: str = ".pdf",
    ) -> None:
        self._upload_dir = Path(upload_dir).resolve()
        self._output_dir = Path(output_dir).resolve()
        self.source_ext = source_ext
        self.target_ext = target_ext

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def ensure_dirs(self) -> None:
        """Create both directories, giving every missing ancestor DIR_MODE too."""
        for d in (self._upload_dir, self._output_dir):
            missing = [p for p in (d, *d.parents) if not p.exists()]
            for p in reversed(missing):
                p.mkdir(mode=DIR_MODE, exist_ok=True)
            logger.info("Using directory %s", d)

    def names_for(self, original_filename: str, when: datetime) -> tuple[str, str]:
        """Return (stored upload name, artifact name) for an upload received at `when`.

        Both share `{base}_{YYYYMMDD_HHMMSS}`; `base` is the last path
        component of the client filename without its final extension.
        """
        name = original_filename.replace("\\", "/").rsplit("/", 1)[-1]
        dot = name.rfind(".")
        base = name[:dot] if dot >= 0 else name
        if not base:
            base = "document"
        stem = f"{base}_{when.strftime(TIMESTAMP_FORMAT)}"
        return f"{stem}{self.source_ext}", f"{stem}{self.target_ext}"

    def upload_path(self, filename: str) -> Path:
        return self._upload_dir / filename

    def output_path(self, filename: str) -> Path:
        return self._output_dir / filename

    def remove(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True


class EngineConverter(ConverterGateway):
    """Drive a DocumentEngine and translate its failures into ConversionError."""

    def __init__(self, engine: DocumentEngine) -> None:
        self._engine = engine

    def convert(self, input_path: str, output_path: str) -> None:
        try:
            document = self._engine.open(input_path)
        except Exception as e:
            raise ConversionError("open", f"failed to open DOCX file: {e}") from e

        try:
            rendered = self._engine.render(document)
        except Exception as e:
            raise ConversionError("render", f"failed to render PDF: {e}") from e

        try:
            self._engine.write(rendered, output_path)
        except Exception as e:
            raise ConversionError("write", f"failed to write PDF file: {e}") from e


class DocxPdfEngine(DocumentEngine):
    """Render DOCX body content (paragraphs and tables) to PDF.

    Reading is done with python-docx, layout and output with reportlab's
    platypus. Headings, the title style, bullet lists and bold, italic and
    underlined runs are kept; images, headers, footers and exact fonts are not.
    """

    def __init__(self, pagesize: tuple[float, float] = A4, margin: float = 2 * cm) -> None:
        self._pagesize = pagesize
        self._margin = margin

    def open(self, path: str) -> Any:
        return open_docx(path)

    def render(self, document: Any) -> list[Flowable]:
        styles = getSampleStyleSheet()
        story: list[Flowable] = []
        for block in document.iter_inner_content():
            if isinstance(block, DocxTable):
                table = self._table(block, styles)
                if table is not None:
                    story.append(table)
                    story.append(Spacer(1, 6))
            else:
                story.append(self._paragraph(block, styles))
        if not story:
            # SimpleDocTemplate refuses to build an empty story
            story.append(Spacer(1, 1))
        return story

    def write(self, rendered: list[Flowable], path: str) -> None:
        doc = SimpleDocTemplate(
            path,
            pagesize=self._pagesize,
            leftMargin=self._margin,
            rightMargin=self._margin,
            topMargin=self._margin,
            bottomMargin=self._margin,
        )
        doc.build(rendered)

    @property
    def frame_width(self) -> float:
        return self._pagesize[0] - 2 * self._margin

    def _paragraph(self, paragraph: Any, styles: StyleSheet1) -> Flowable:
        markup = self._markup(paragraph)
        if not markup.strip():
            return Spacer(1, 8)

        style_name = paragraph.style.name if paragraph.style is not None else ""
        if style_name == "Title":
            return Paragraph(markup, styles["Title"])
        if style_name.startswith("Heading "):
            level = style_name.removeprefix("Heading ").strip()
            if level.isdigit() and 1 <= int(level) <= 6:
                return Paragraph(markup, styles[f"Heading{level}"])
        if style_name.startswith("List Bullet"):
            return Paragraph(markup, styles["Bullet"], bulletText="•")
        return Paragraph(markup, styles["BodyText"])

    def _markup(self, paragraph: Any) -> str:
        parts: list[str] = []
        for item in paragraph.iter_inner_content():
            runs = item.runs if isinstance(item, Hyperlink) else [item]
            for run in runs:
                text = escape(run.text).replace("\t", "    ").replace("\n", "<br/>")
                if not text:
                    continue
                if run.bold:
                    text = f"<b>{text}</b>"
                if run.italic:
                    text = f"<i>{text}</i>"
                if run.underline:
                    text = f"<u>{text}</u>"
                parts.append(text)
        return "".join(parts)

    def _table(self, table: DocxTable, styles: StyleSheet1) -> Table | None:
        rows = [[cell.text for cell in row.cells] for row in table.rows]
        if not rows:
            return None
        ncols = max(len(r) for r in rows)
        if ncols == 0:
            return None
        cell_style = styles["BodyText"]
        data = [
            [Paragraph(escape(text), cell_style) for text in r] + [""] * (ncols - len(r))
            for r in rows
        ]
        pdf_table = Table(data, colWidths=[self.frame_width / ncols] * ncols, hAlign="LEFT")
        pdf_table.setStyle(
            TableStyle([
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ])
        )
        return pdf_table
