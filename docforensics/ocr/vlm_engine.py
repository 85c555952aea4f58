"""OCR engine backed by a vision-language model."""

from pathlib import Path

from docforensics.logging.logger import Log
from docforensics.ocr.base import BaseOcrEngine
from docforensics.ocr.client_base import BaseVisionClient
from docforensics.ocr.exceptions import ExternalServiceError
from docforensics.ocr.prompt_loader import load_prompt_template


class VlmOcrEngine(BaseOcrEngine):
    """Sends each page range to a vision model and returns its Markdown."""

    def __init__(
        self,
        *,
        client: BaseVisionClient,
        model: str,
        max_output_tokens: int = 32000,
        prompt_template_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._max_output_tokens = max_output_tokens
        self._prompt_template = load_prompt_template(prompt_template_path)

    @property
    def engine_id(self) -> str:
        return self._model

    def extract_markdown(self, pdf_bytes: bytes, *, first_page: int, last_page: int) -> str:
        prompt = self._prompt_template.format(first_page=first_page, last_page=last_page)
        Log.info(
            f"OCR request for pages {first_page}-{last_page} ({len(pdf_bytes)} bytes)",
            model=self._model,
        )
        raw = self._client.create_completion(
            model=self._model,
            prompt=prompt,
            pdf_bytes=pdf_bytes,
            document_name=f"pages-{first_page}-{last_page}.pdf",
            max_output_tokens=self._max_output_tokens,
        )
        markdown = self._strip_fence(raw)
        if not markdown.strip():
            raise ExternalServiceError(
                f"OCR returned no text for pages {first_page}-{last_page}"
            )
        return markdown

    @staticmethod
    def _strip_fence(raw: str) -> str:
        """Remove a ```markdown fence wrapped around the whole answer."""
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)
        return cleaned
