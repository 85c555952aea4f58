class PdfProcessingError(Exception):
    """Raised when a PDF cannot be read, counted, or sliced."""
