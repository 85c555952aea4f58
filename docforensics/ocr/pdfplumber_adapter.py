import io

import pdfplumber

from docforensics.ocr.base import BaseOcrEngine
from docforensics.ocr.exceptions import ExternalServiceError


class PdfPlumberOcrEngine(BaseOcrEngine):
    """Reads the embedded text layer with pdfplumber. No network, no vision model.

    Each page becomes a ``## Page N`` section numbered in source-document pages.
    """

    @property
    def engine_id(self) -> str:
        return "pdfplumber"

    def extract_markdown(self, pdf_bytes: bytes, *, first_page: int, last_page: int) -> str:
        _ = last_page
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                sections = [
                    f"## Page {first_page + offset}\n\n{(page.extract_text() or '').strip()}"
                    for offset, page in enumerate(pdf.pages)
                ]
        except Exception as exc:
            raise ExternalServiceError(f"pdfplumber extraction failed: {exc}") from exc
        return "\n\n".join(sections).strip()
