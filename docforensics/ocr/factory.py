from typing import ClassVar

from docforensics.config.settings import Settings
from docforensics.ocr.base import BaseOcrEngine
from docforensics.ocr.example_client_adapter import ExampleVisionClient
from docforensics.ocr.openai_client_adapter import OpenAIVisionClient
from docforensics.ocr.pdfplumber_adapter import PdfPlumberOcrEngine
from docforensics.ocr.vlm_engine import VlmOcrEngine


class OcrEngineFactory:
    """Creates the configured OCR engine."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "together": "https://api.together.xyz/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseOcrEngine:
        """Create a configured OCR engine from application settings."""
        provider = settings.ocr_provider.lower()
        if provider == "example":
            return VlmOcrEngine(client=ExampleVisionClient(), model="example")
        if provider == "pdfplumber":
            return PdfPlumberOcrEngine()
        client = OpenAIVisionClient(
            api_key=settings.ocr_openai_api_key,
            timeout_seconds=settings.ocr_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )
        return VlmOcrEngine(
            client=client,
            model=settings.ocr_openai_model_name,
            max_output_tokens=settings.ocr_max_output_tokens,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.ocr_openai_compatible_base_url.strip()
            if not url:
                raise ValueError(
                    "ocr_openai_compatible_base_url is required for "
                    "ocr_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "pdfplumber",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown OCR provider '{provider}'. Choose from: {supported}")
