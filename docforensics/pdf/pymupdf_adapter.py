import pymupdf

from docforensics.pdf.base import BasePdfTool, clamp_range
from docforensics.pdf.exceptions import PdfProcessingError


class PyMuPdfTool(BasePdfTool):
    """Counts and slices PDFs using PyMuPDF."""

    def page_count(self, pdf_bytes: bytes) -> int:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return int(doc.page_count)
        except Exception as exc:
            raise PdfProcessingError(f"pymupdf could not read PDF: {exc}") from exc

    def extract_range(self, pdf_bytes: bytes, from_page: int, to_page: int) -> bytes:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as src:  # type: ignore[no-untyped-call]
                bounds = clamp_range(from_page, to_page, src.page_count)
                if bounds is None:
                    raise PdfProcessingError(
                        f"Pages {from_page}-{to_page} are outside a "
                        f"{src.page_count}-page document"
                    )
                start, end = bounds
                with pymupdf.open() as dst:  # type: ignore[no-untyped-call]
                    # insert_pdf takes 0-based inclusive page numbers.
                    dst.insert_pdf(src, from_page=start - 1, to_page=end - 1)
                    return bytes(dst.tobytes(garbage=3, deflate=True))
        except PdfProcessingError:
            raise
        except Exception as exc:
            raise PdfProcessingError(f"pymupdf range extraction failed: {exc}") from exc
