from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Index

from .base import Base

JOB_STATUS_PENDING = 'pending'
JOB_STATUS_PROCESSING = 'processing'
JOB_STATUS_COMPLETED = 'completed'
JOB_STATUS_FAILED = 'failed'

JOB_STATUSES = (
    JOB_STATUS_PENDING,
    JOB_STATUS_PROCESSING,
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
)
TERMINAL_STATUSES = frozenset({JOB_STATUS_COMPLETED, JOB_STATUS_FAILED})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExamProcessingJob(Base):
    """
    Lifecycle of one asynchronous exam processing request.

    pending -> processing -> completed | failed. Terminal rows are never
    mutated again. Exactly one of result / error_message is set once terminal.
    """
    __tablename__ = 'exam_processing_jobs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_id = Column(String(36), nullable=False, unique=True, index=True)
    exam_code = Column(String(255), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=JOB_STATUS_PENDING)
    progress = Column(Integer, nullable=False, default=0)
    current_step = Column(String(255), nullable=True)

    result = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)

    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_exam_job_status', 'status'),
        Index('idx_exam_job_created', 'created_at'),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def __repr__(self) -> str:
        return f"<ExamProcessingJob {self.job_id} exam={self.exam_code} status={self.status} progress={self.progress}>"
