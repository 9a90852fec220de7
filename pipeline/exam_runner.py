"""Exam job runner - drives one exam processing job to a terminal state.

Used by the RQ worker (process_exam_job) and by the in-process fallback
dispatcher. Steps run strictly in sequence and report a fixed checkpoint
progress before each one:

    0   starting
    5   validate exam exists
    10  parse stored answers
    15  load reference mapping
    20  score branches and environment
    25  call recommendation API
    90  recommendation API returned
    95  finalize
    100 completed

Any exception ends the job as failed with the exception message. There is
no job-level retry; the recommendation client has its own retry loop.
"""

import logging
import time
from typing import Optional

from core.ai.recommendation_client import RECOMMENDATIONS_UNAVAILABLE
from core.exam.messages import translate, DEFAULT_LOCALE
from database.models import JOB_STATUS_COMPLETED, JOB_STATUS_FAILED
from pipeline.context import ExamContext, get_worker_context
from pipeline.job_store import JobStore
from pipeline.progress import (
    Checkpoint,
    STARTING,
    VALIDATING_EXAM,
    PARSING_ANSWERS,
    LOADING_MAPPING,
    SCORING,
    AWAITING_AI,
    AI_RESPONSE_RECEIVED,
    FINALIZING,
)

logger = logging.getLogger(__name__)


class _ProgressReporter:
    """Writes checkpoint progress with the step label in the job's locale."""

    def __init__(self, store: JobStore, job_id: str, locale: str):
        self.store = store
        self.job_id = job_id
        self.locale = locale

    def checkpoint(self, checkpoint: Checkpoint) -> None:
        self.store.update_progress(
            self.job_id,
            checkpoint.progress,
            translate(checkpoint.message_key, self.locale)
        )


def run_exam_job(
    ctx: ExamContext,
    job_id: str,
    exam_code: str,
    locale: str = DEFAULT_LOCALE
) -> Optional[str]:
    """
    Process one exam job.

    Args:
        ctx: Wired dependencies
        job_id: Job row to drive
        exam_code: Exam to score
        locale: Locale for step labels, error messages and the AI endpoint

    Returns:
        The terminal status reached, or None if the job row was missing and
        the attempt was abandoned.
    """
    store = ctx.job_store

    job = store.get(job_id)
    if job is None:
        logger.error(f"Job not found, abandoning attempt: job_id={job_id}, exam_code={exam_code}")
        return None

    if job.is_terminal:
        logger.warning(f"Job {job_id} is already {job.status}, skipping")
        return job.status

    if not store.mark_processing(job_id):
        logger.error(f"Could not claim job {job_id}, abandoning attempt")
        return None

    reporter = _ProgressReporter(store, job_id, locale)
    service = ctx.exam_service
    job_start = time.monotonic()

    try:
        reporter.checkpoint(STARTING)
        logger.info(f"Processing exam job: job_id={job_id}, exam_code={exam_code}, locale={locale}")

        reporter.checkpoint(VALIDATING_EXAM)
        enrollment = service.validate_and_get_exam(exam_code, locale)

        reporter.checkpoint(PARSING_ANSWERS)
        answers = service.parse_exam_answers(enrollment, locale)

        reporter.checkpoint(LOADING_MAPPING)
        mapping = service.load_mapping(locale)

        reporter.checkpoint(SCORING)
        exam_result, _ = service.process_exam_data(answers, enrollment, mapping)
        profile = exam_result.to_payload()

        reporter.checkpoint(AWAITING_AI)
        ai_start = time.monotonic()
        recommendations = ctx.recommendation_client.get_recommendations(profile, locale)
        reporter.checkpoint(AI_RESPONSE_RECEIVED)

        logger.info(
            f"AI recommendations step finished: job_id={job_id}, "
            f"duration={time.monotonic() - ai_start:.2f}s"
        )

        reporter.checkpoint(FINALIZING)

        if recommendations is RECOMMENDATIONS_UNAVAILABLE:
            logger.info(f"AI recommendations unavailable, storing scored profile for job {job_id}")
            final_result = profile
        else:
            final_result = recommendations

        store.mark_completed(job_id, final_result)

        logger.info(
            f"Exam processing job completed: job_id={job_id}, exam_code={exam_code}, "
            f"duration={time.monotonic() - job_start:.2f}s"
        )
        return JOB_STATUS_COMPLETED

    except Exception as e:
        logger.error(
            f"Exam processing job failed: job_id={job_id}, exam_code={exam_code}, error={e}",
            exc_info=True
        )
        store.mark_failed(job_id, str(e) or e.__class__.__name__)
        return JOB_STATUS_FAILED


# Worker task - must be at module level for RQ
def process_exam_job(
    job_id: str,
    exam_code: str,
    locale: str = DEFAULT_LOCALE,
    ctx: Optional[ExamContext] = None
) -> Optional[str]:
    """Entry point executed by queue workers and the in-process dispatcher."""
    return run_exam_job(ctx or get_worker_context(), job_id, exam_code, locale)


def report_job_failure(job, connection, exc_type, exc_value, tb) -> None:
    """
    RQ on_failure callback.

    Covers failures that escape run_exam_job, such as a work-horse killed
    at the timeout ceiling. A job that is already terminal is left alone.
    """
    job_id = job.args[0] if job.args else None
    if not job_id:
        return

    message = str(exc_value) or getattr(exc_type, "__name__", "Job failed")
    logger.error(f"Exam processing job permanently failed: job_id={job_id}, error={message}")

    try:
        get_worker_context().job_store.mark_failed(job_id, message)
    except Exception as db_error:
        logger.error(f"Failed to record job failure for {job_id}: {db_error}")
