from abc import ABC, abstractmethod


class BaseOcrEngine(ABC):
    """Contract for services that turn a PDF page range into Markdown."""

    @property
    @abstractmethod
    def engine_id(self) -> str:
        """Identifier recorded on the forensic certificate."""

    @abstractmethod
    def extract_markdown(self, pdf_bytes: bytes, *, first_page: int, last_page: int) -> str:
        """Extract the text of ``pdf_bytes`` as Markdown.

        Args:
            pdf_bytes: A standalone PDF holding the pages to read.
            first_page: Page number, in the source document, of the first page.
            last_page: Page number, in the source document, of the last page.

        Raises:
            ExternalServiceError: on any failure.
        """
