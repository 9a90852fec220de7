"""Job State Store - committed, per-call access to exam processing jobs."""

import logging
from typing import Any, Callable, ContextManager, Optional

from database.models import ExamProcessingJob
from database.repositories.exam_job import ExamJobRepository
from database.uow import exam_uow

logger = logging.getLogger(__name__)


class JobStore:
    """
    Each call runs in its own unit of work and commits before returning, so a
    status poller sees every mutation as soon as the call returns.

    Only the orchestrator mutates a job after creation; pollers only read.
    """

    def __init__(self, uow_factory: Callable[[], ContextManager[ExamJobRepository]] = exam_uow):
        self._uow = uow_factory

    def create(self, job_id: str, exam_code: str) -> ExamProcessingJob:
        with self._uow() as repo:
            job = repo.create_job(job_id, exam_code)
        logger.debug(f"Created job {job_id} for exam {exam_code}")
        return job

    def get(self, job_id: str) -> Optional[ExamProcessingJob]:
        with self._uow() as repo:
            return repo.get_by_job_id(job_id)

    def mark_processing(self, job_id: str) -> bool:
        with self._uow() as repo:
            return repo.mark_processing(job_id)

    def update_progress(self, job_id: str, progress: int, step: Optional[str]) -> bool:
        with self._uow() as repo:
            return repo.update_progress(job_id, progress, step)

    def mark_completed(self, job_id: str, result: Any) -> bool:
        with self._uow() as repo:
            return repo.mark_completed(job_id, result)

    def mark_failed(self, job_id: str, error_message: str) -> bool:
        with self._uow() as repo:
            return repo.mark_failed(job_id, error_message)
