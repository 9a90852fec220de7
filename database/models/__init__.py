from .base import Base
from .exam_job import (
    ExamProcessingJob,
    JOB_STATUS_PENDING,
    JOB_STATUS_PROCESSING,
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
    JOB_STATUSES,
    TERMINAL_STATUSES,
)

__all__ = [
    'Base',
    'ExamProcessingJob',
    'JOB_STATUS_PENDING',
    'JOB_STATUS_PROCESSING',
    'JOB_STATUS_COMPLETED',
    'JOB_STATUS_FAILED',
    'JOB_STATUSES',
    'TERMINAL_STATUSES',
]
