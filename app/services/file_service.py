"""Text extraction from uploaded documents."""

from dataclasses import dataclass, field
from io import BytesIO
from typing import Optional

from app.logging_config import get_logger

logger = get_logger("file_service")

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

FILE_TYPE_LABELS = {
    PDF_MIME: "PDF",
    DOCX_MIME: "Word Document",
    "text/plain": "Text File",
    "text/markdown": "Text File",
    "text/csv": "Text File",
}


class UnsupportedFileTypeError(ValueError):
    def __init__(self, mime_type: str):
        self.mime_type = mime_type
        super().__init__(f"Unsupported file type: {mime_type}")


class ExtractionError(Exception):
    pass


@dataclass
class ExtractedFile:
    text: str
    file_type: str
    pages: Optional[int] = None
    warnings: list[str] = field(default_factory=list)

    def info(self) -> dict:
        info: dict = {"type": self.file_type}
        if self.pages is not None:
            info["pages"] = self.pages
        if self.warnings:
            info["warnings"] = self.warnings
        return info


def supported_types() -> list[str]:
    return list(FILE_TYPE_LABELS)


def _extract_pdf(data: bytes) -> ExtractedFile:
    import fitz  # PyMuPDF

    with fitz.open(stream=data, filetype="pdf") as doc:
        pages = [page.get_text("text") for page in doc]
        page_count = doc.page_count

    return ExtractedFile(text="\n\n".join(p for p in pages if p.strip()), file_type="PDF", pages=page_count)


def _extract_docx(data: bytes) -> ExtractedFile:
    from docx import Document

    doc = Document(BytesIO(data))
    parts = [para.text for para in doc.paragraphs if para.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(" | ".join(cells))
    return ExtractedFile(text="\n".join(parts), file_type="Word Document")


def _extract_plain(data: bytes) -> ExtractedFile:
    warnings = []
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        text = data.decode("utf-8", errors="replace")
        warnings.append("File is not valid UTF-8; undecodable bytes were replaced")
    return ExtractedFile(text=text, file_type="Text File", warnings=warnings)


def extract_text(data: bytes, mime_type: str, filename: str = "file") -> ExtractedFile:
    """Extract text from an uploaded file.

    Raises:
        UnsupportedFileTypeError: mime type has no extractor.
        ExtractionError: the file could not be parsed.
    """
    if mime_type not in FILE_TYPE_LABELS:
        raise UnsupportedFileTypeError(mime_type)

    try:
        if mime_type == PDF_MIME:
            extracted = _extract_pdf(data)
        elif mime_type == DOCX_MIME:
            extracted = _extract_docx(data)
        else:
            extracted = _extract_plain(data)
    except Exception as e:
        raise ExtractionError(f"Failed to extract text from {filename}: {e}") from e

    logger.info(
        "Extracted file text",
        extra={"context": {"file_name": filename, "mime_type": mime_type, "chars": len(extracted.text)}},
    )
    return extracted
