class QueueFullError(Exception):
    """Raised when the job dispatcher has no free slot for another job."""
