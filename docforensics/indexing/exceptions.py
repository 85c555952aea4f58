class InvalidTreeFormatError(Exception):
    """Raised when serialized PageIndex data cannot be turned back into a tree."""
