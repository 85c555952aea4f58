from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from docforensics.ocr import OcrEngineFactory, VlmOcrEngine
from docforensics.ocr.example_client_adapter import ExampleVisionClient
from docforensics.ocr.exceptions import ExternalServiceError
from docforensics.ocr.pdfplumber_adapter import PdfPlumberOcrEngine
from docforensics.ocr.prompt_loader import load_prompt_template


def _make_settings(provider: str, **overrides: object) -> MagicMock:
    settings = MagicMock(
        ocr_provider=provider,
        ocr_openai_api_key="k",
        ocr_openai_model_name="gpt-4o-mini",
        ocr_openai_compatible_base_url="",
        ocr_timeout_seconds=30,
        ocr_max_output_tokens=1000,
    )
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


class TestPromptLoader:
    def test_bundled_template_has_page_placeholders(self) -> None:
        template = load_prompt_template()
        assert "{first_page}" in template
        assert "{last_page}" in template

    def test_custom_path(self, tmp_path: Path) -> None:
        path = tmp_path / "prompt.txt"
        path.write_text("Pages {first_page}-{last_page}", encoding="utf-8")
        assert load_prompt_template(path) == "Pages {first_page}-{last_page}"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ExternalServiceError, match="prompt template"):
            load_prompt_template(tmp_path / "missing.txt")


class TestVlmOcrEngine:
    def test_example_client_labels_pages(self) -> None:
        engine = VlmOcrEngine(client=ExampleVisionClient(), model="example")
        markdown = engine.extract_markdown(b"%PDF", first_page=36, last_page=40)
        assert markdown.startswith("# Pages 36-40")
        assert engine.engine_id == "example"

    def test_prompt_carries_page_range(self) -> None:
        client = MagicMock()
        client.create_completion.return_value = "text"
        engine = VlmOcrEngine(client=client, model="m", max_output_tokens=123)
        engine.extract_markdown(b"%PDF", first_page=1, last_page=35)
        kwargs = client.create_completion.call_args.kwargs
        assert "Pages 1-35." in kwargs["prompt"]
        assert kwargs["model"] == "m"
        assert kwargs["max_output_tokens"] == 123
        assert kwargs["pdf_bytes"] == b"%PDF"

    def test_strips_markdown_fence(self) -> None:
        client = MagicMock()
        client.create_completion.return_value = "```markdown\n# Title\n\nBody\n```"
        engine = VlmOcrEngine(client=client, model="m")
        assert engine.extract_markdown(b"%PDF", first_page=1, last_page=1) == "# Title\n\nBody"

    def test_blank_answer_raises(self) -> None:
        client = MagicMock()
        client.create_completion.return_value = "   \n"
        engine = VlmOcrEngine(client=client, model="m")
        with pytest.raises(ExternalServiceError, match="no text"):
            engine.extract_markdown(b"%PDF", first_page=1, last_page=1)


class TestPdfPlumberOcrEngine:
    def test_sections_use_source_page_numbers(self, multi_page_pdf_bytes: bytes) -> None:
        engine = PdfPlumberOcrEngine()
        markdown = engine.extract_markdown(multi_page_pdf_bytes, first_page=5, last_page=6)
        assert "## Page 5\n\nPage 1 content" in markdown
        assert "## Page 6\n\nPage 2 content" in markdown
        assert engine.engine_id == "pdfplumber"

    def test_invalid_bytes_raise(self) -> None:
        with pytest.raises(ExternalServiceError):
            PdfPlumberOcrEngine().extract_markdown(b"not a pdf", first_page=1, last_page=1)


class TestOcrEngineFactory:
    def test_example_provider(self) -> None:
        engine = OcrEngineFactory.create(_make_settings("example"))
        assert isinstance(engine, VlmOcrEngine)
        assert engine.engine_id == "example"

    def test_pdfplumber_provider(self) -> None:
        engine = OcrEngineFactory.create(_make_settings("pdfplumber"))
        assert isinstance(engine, PdfPlumberOcrEngine)

    def test_openai_provider_uses_default_base_url(self) -> None:
        with patch("docforensics.ocr.factory.OpenAIVisionClient") as mock_client_cls:
            engine = OcrEngineFactory.create(_make_settings("openai"))
        assert mock_client_cls.call_args.kwargs["base_url"] is None
        assert engine.engine_id == "gpt-4o-mini"

    def test_known_compatible_provider(self) -> None:
        with patch("docforensics.ocr.factory.OpenAIVisionClient") as mock_client_cls:
            OcrEngineFactory.create(_make_settings("openrouter"))
        assert mock_client_cls.call_args.kwargs["base_url"] == "https://openrouter.ai/api/v1"

    def test_openai_compatible_requires_base_url(self) -> None:
        with pytest.raises(ValueError, match="ocr_openai_compatible_base_url"):
            OcrEngineFactory.create(_make_settings("openai_compatible"))

    def test_openai_compatible_with_base_url(self) -> None:
        settings = _make_settings(
            "openai_compatible", ocr_openai_compatible_base_url="http://llm.local/v1"
        )
        with patch("docforensics.ocr.factory.OpenAIVisionClient") as mock_client_cls:
            OcrEngineFactory.create(settings)
        assert mock_client_cls.call_args.kwargs["base_url"] == "http://llm.local/v1"

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown OCR provider"):
            OcrEngineFactory.create(_make_settings("nope"))
