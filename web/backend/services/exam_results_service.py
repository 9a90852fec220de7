#!/usr/bin/env python3
"""
Exam results service - submission and status lookup for exam processing jobs.
"""

import uuid
import logging
from datetime import datetime
from typing import Optional

from core.exam.exceptions import NotFoundError
from core.exam.messages import translate, DEFAULT_LOCALE
from database.models import ExamProcessingJob, JOB_STATUS_COMPLETED, JOB_STATUS_FAILED
from pipeline.job_store import JobStore
from pipeline.progress import display_progress
from pipeline.queue import ExamJobDispatcher
from ..models.responses import JobStatusData, JobStatusResponse

logger = logging.getLogger(__name__)


class ExamResultsService:
    """Creates exam jobs, hands them to the dispatcher and reports their state."""

    def __init__(self, job_store: JobStore, dispatcher: ExamJobDispatcher):
        self.job_store = job_store
        self.dispatcher = dispatcher

    def submit(self, exam_code: str, locale: str = DEFAULT_LOCALE) -> str:
        """
        Create a pending job for the exam and queue it.

        Returns:
            The new job id.
        """
        job_id = str(uuid.uuid4())
        self.job_store.create(job_id, exam_code)

        try:
            self.dispatcher.dispatch(job_id, exam_code, locale)
        except Exception as e:
            # Nobody will ever pick the row up; record why instead of leaving it pending.
            logger.error(f"Failed to dispatch job {job_id} for exam {exam_code}: {e}")
            self.job_store.mark_failed(job_id, str(e) or e.__class__.__name__)
            raise

        logger.info(f"Exam processing job submitted: job_id={job_id}, exam_code={exam_code}, locale={locale}")
        return job_id

    def get_status(
        self,
        job_id: str,
        locale: str = DEFAULT_LOCALE,
        now: Optional[datetime] = None
    ) -> JobStatusResponse:
        """
        Raises:
            NotFoundError: If no job has this id.
        """
        job = self.job_store.get(job_id)
        if job is None:
            raise NotFoundError(translate("job_not_found", locale))

        return build_status_response(job, now)


def build_status_response(job: ExamProcessingJob, now: Optional[datetime] = None) -> JobStatusResponse:
    progress = job.progress or 0
    shown, estimated = display_progress(job.status, progress, job.started_at, now)

    fields = dict(
        status=job.status,
        progress=progress,
        display_progress=shown,
        display_progress_is_estimated=estimated,
        current_step=job.current_step,
        started_at=job.started_at,
    )

    if job.status == JOB_STATUS_COMPLETED:
        fields.update(result=job.result, completed_at=job.completed_at)
    elif job.status == JOB_STATUS_FAILED:
        fields.update(error_message=job.error_message, completed_at=job.completed_at)

    return JobStatusResponse(
        success=job.status != JOB_STATUS_FAILED,
        data=JobStatusData(**fields)
    )
