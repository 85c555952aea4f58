from abc import ABC, abstractmethod


class BaseVisionClient(ABC):
    """Contract for provider-specific vision-language model clients."""

    @abstractmethod
    def create_completion(
        self,
        *,
        model: str,
        prompt: str,
        pdf_bytes: bytes,
        document_name: str,
        max_output_tokens: int,
    ) -> str:
        """Send the PDF and prompt to the provider, return the text response."""
