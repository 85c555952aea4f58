from docforensics.config.settings import Settings
from docforensics.pdf.base import BasePdfTool
from docforensics.pdf.pymupdf_adapter import PyMuPdfTool


class PdfToolFactory:
    """Creates the correct PDF tool based on settings."""

    ADAPTERS: dict[str, type[BasePdfTool]] = {
        "pymupdf": PyMuPdfTool,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfTool:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
