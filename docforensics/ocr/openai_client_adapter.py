import base64

import httpx
import openai

from docforensics.ocr.client_base import BaseVisionClient
from docforensics.ocr.exceptions import ExternalServiceError, ExternalServiceNetworkError


class OpenAIVisionClient(BaseVisionClient):
    """Vision client built on the OpenAI-compatible chat API.

    The PDF travels inline as a base64 ``file`` content part.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def create_completion(
        self,
        *,
        model: str,
        prompt: str,
        pdf_bytes: bytes,
        document_name: str,
        max_output_tokens: int,
    ) -> str:
        encoded = base64.b64encode(pdf_bytes).decode("ascii")
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=0.0,
                max_completion_tokens=max_output_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "file",
                                "file": {
                                    "filename": document_name,
                                    "file_data": f"data:application/pdf;base64,{encoded}",
                                },
                            },
                            {"type": "text", "text": prompt},
                        ],
                    }
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExternalServiceNetworkError(f"OCR provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ExternalServiceError(f"OCR provider API error: {exc}") from exc

        if not response.choices:
            raise ExternalServiceError("OCR provider returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise ExternalServiceError("OCR provider returned empty response")
        return content
