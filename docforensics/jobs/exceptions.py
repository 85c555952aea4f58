class JobStoreError(Exception):
    """Base exception for job store errors."""


class JobNotFoundError(JobStoreError):
    """Raised when a job ID does not exist."""


class InvalidTransitionError(JobStoreError):
    """Raised when a status change would violate pending -> processing -> terminal."""
