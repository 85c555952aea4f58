class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class NoFileProvidedError(ProcessorError):
    """Raised when a job has neither direct bytes nor an upload reference."""


class FileTooLargeError(ProcessorError):
    """Raised when the input document exceeds the configured size limit."""


class InvalidRangeError(ProcessorError):
    """Raised when a requested extraction range is malformed."""


class ProcessingFailedError(ProcessorError):
    """Raised for unexpected failures surfaced on the job as its error message."""
