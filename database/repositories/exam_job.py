import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select, func, or_

from database.models import (
    ExamProcessingJob,
    JOB_STATUS_PENDING,
    JOB_STATUS_PROCESSING,
    JOB_STATUS_COMPLETED,
    JOB_STATUS_FAILED,
    JOB_STATUSES,
)
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ExamJobRepository(BaseRepository):
    """
    Persistence for exam processing jobs.

    Mutations are refused once a job is terminal: they log a warning and
    return False without touching the row.
    """

    def create_job(self, job_id: str, exam_code: str) -> ExamProcessingJob:
        job = ExamProcessingJob(
            job_id=job_id,
            exam_code=exam_code,
            status=JOB_STATUS_PENDING,
            progress=0,
        )
        self.db.add(job)
        self.flush()
        return job

    def get_by_job_id(self, job_id: str) -> Optional[ExamProcessingJob]:
        stmt = select(ExamProcessingJob).where(ExamProcessingJob.job_id == job_id)
        return self.scalar_or_none(stmt)

    def _get_mutable(self, job_id: str, action: str) -> Optional[ExamProcessingJob]:
        job = self.get_by_job_id(job_id)
        if job is None:
            logger.warning(f"Cannot {action}: job {job_id} not found")
            return None
        if job.is_terminal:
            logger.warning(f"Cannot {action}: job {job_id} is already {job.status}")
            return None
        return job

    def mark_processing(self, job_id: str) -> bool:
        job = self._get_mutable(job_id, "mark processing")
        if job is None:
            return False
        job.status = JOB_STATUS_PROCESSING
        job.started_at = datetime.now(timezone.utc)
        return True

    def update_progress(self, job_id: str, progress: int, step: Optional[str]) -> bool:
        job = self._get_mutable(job_id, "update progress")
        if job is None:
            return False
        job.progress = max(0, min(100, int(progress)))
        job.current_step = step
        return True

    def mark_completed(self, job_id: str, result: Any) -> bool:
        job = self._get_mutable(job_id, "mark completed")
        if job is None:
            return False
        job.status = JOB_STATUS_COMPLETED
        job.progress = 100
        job.result = result
        job.error_message = None
        job.completed_at = datetime.now(timezone.utc)
        return True

    def mark_failed(self, job_id: str, error_message: str) -> bool:
        job = self._get_mutable(job_id, "mark failed")
        if job is None:
            return False
        job.status = JOB_STATUS_FAILED
        job.result = None
        job.error_message = error_message
        job.completed_at = datetime.now(timezone.utc)
        return True

    def count_by_status(
        self,
        since: Optional[datetime] = None,
        windowed_statuses: Optional[Iterable[str]] = None
    ) -> Dict[str, int]:
        """
        Job counts for every status.

        since limits the count to jobs created after it. When windowed_statuses
        is given, only those statuses are limited; the rest are counted over
        all time.
        """
        stmt = select(ExamProcessingJob.status, func.count()).group_by(ExamProcessingJob.status)
        if since is not None:
            in_window = ExamProcessingJob.created_at >= since
            if windowed_statuses is not None:
                in_window = or_(ExamProcessingJob.status.not_in(list(windowed_statuses)), in_window)
            stmt = stmt.where(in_window)
        counts = {status: 0 for status in JOB_STATUSES}
        for status, count in self.db.execute(stmt).all():
            counts[status] = count
        return counts

    def list_recent(self, limit: int = 10) -> List[ExamProcessingJob]:
        stmt = select(ExamProcessingJob).order_by(ExamProcessingJob.created_at.desc()).limit(limit)
        return self.scalars(stmt)

    def list_stale_processing(self, older_than: timedelta) -> List[ExamProcessingJob]:
        """Processing jobs whose worker has been silent longer than the timeout."""
        cutoff = datetime.now(timezone.utc) - older_than
        stmt = select(ExamProcessingJob).where(
            ExamProcessingJob.status == JOB_STATUS_PROCESSING,
            ExamProcessingJob.updated_at < cutoff
        )
        return self.scalars(stmt)

    def list_stale_pending(self, older_than: timedelta) -> List[ExamProcessingJob]:
        """Pending jobs no worker has picked up within older_than of creation."""
        cutoff = datetime.now(timezone.utc) - older_than
        stmt = select(ExamProcessingJob).where(
            ExamProcessingJob.status == JOB_STATUS_PENDING,
            ExamProcessingJob.created_at < cutoff
        ).order_by(ExamProcessingJob.created_at)
        return self.scalars(stmt)
