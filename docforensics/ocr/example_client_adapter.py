"""Example vision client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseVisionClient and register the provider in OcrEngineFactory.
"""

import re

from docforensics.ocr.client_base import BaseVisionClient

_PAGES_RE = re.compile(r"Pages (\d+)-(\d+)")


class ExampleVisionClient(BaseVisionClient):
    """Example adapter that answers with fixed Markdown for the requested pages.

    No network calls. Useful for local development and tests.
    """

    def create_completion(
        self,
        *,
        model: str,
        prompt: str,
        pdf_bytes: bytes,
        document_name: str,
        max_output_tokens: int,
    ) -> str:
        _ = model, pdf_bytes, document_name, max_output_tokens
        match = _PAGES_RE.search(prompt)
        label = f"{match.group(1)}-{match.group(2)}" if match else "all"
        return (
            f"# Pages {label}\n\n"
            f"Text extracted from pages {label} of the submitted document."
        )
