class ExternalServiceError(Exception):
    """Raised when the OCR collaborator fails to return Markdown."""


class ExternalServiceNetworkError(ExternalServiceError):
    """Raised when the OCR provider call fails due to network/infrastructure issues."""
