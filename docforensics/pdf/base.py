from abc import ABC, abstractmethod


class BasePdfTool(ABC):
    """Contract for PDF page counting and page-range extraction adapters."""

    @abstractmethod
    def page_count(self, pdf_bytes: bytes) -> int:
        """Return the number of pages in the document.

        Raises:
            PdfProcessingError: if the bytes are not a readable PDF.
        """

    @abstractmethod
    def extract_range(self, pdf_bytes: bytes, from_page: int, to_page: int) -> bytes:
        """Build a standalone PDF holding pages ``from_page..to_page``.

        Pages are 1-based and inclusive. Requests reaching past either end of
        the document are clamped to the pages that exist.

        Raises:
            PdfProcessingError: if the source is unreadable or the clamped
                range contains no pages.
        """


def clamp_range(from_page: int, to_page: int, total_pages: int) -> tuple[int, int] | None:
    """Intersect a 1-based inclusive range with ``[1, total_pages]``.

    Returns None when the intersection is empty.
    """
    start = max(1, from_page)
    end = min(total_pages, to_page)
    if start > end:
        return None
    return start, end
