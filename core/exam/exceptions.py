"""
Exam processing errors.

Each error carries the HTTP status class it surfaces as when raised on a
request path. Inside the background worker every one of them ends the job
in the ``failed`` state with the error message preserved verbatim.
"""

from typing import Optional


class ExamProcessingError(Exception):
    """Base class for exam pipeline errors."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ExamProcessingError):
    """Raised when the exam code has no matching enrollment record."""
    status_code = 404


class InvalidDataError(ExamProcessingError):
    """Raised when the stored answers blob cannot be parsed."""
    status_code = 422


class ConfigurationError(ExamProcessingError):
    """Raised when the reference mapping source is missing or unreadable."""
    status_code = 500


class UpstreamError(ExamProcessingError):
    """Raised when the recommendation API fails after all retries."""
    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status
