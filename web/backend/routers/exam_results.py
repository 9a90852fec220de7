#!/usr/bin/env python3
"""
Exam result endpoints - submit an exam for processing and poll the job.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from core.config_loader import get_config
from core.exam.exceptions import NotFoundError
from core.exam.messages import translate
from ..dependencies import get_exam_results_service, get_locale
from ..models.requests import ProcessExamRequest
from ..models.responses import ProcessExamData, ProcessExamResponse, JobStatusResponse, ErrorResponse
from ..services.exam_results_service import ExamResultsService

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api/exam-results", tags=["exam-results"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
}


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"success": False, "message": f"Rate limit exceeded: {exc.detail}"}
    )


def _submit_rate_limit() -> str:
    return get_config().web.submit_rate_limit


@router.post(
    "/process",
    status_code=202,
    response_model=ProcessExamResponse,
    responses={422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
@limiter.limit(_submit_rate_limit)
def process_exam_results(
    request: Request,
    body: ProcessExamRequest,
    locale: str = Depends(get_locale),
    service: ExamResultsService = Depends(get_exam_results_service)
):
    """
    Start processing an exam in the background.

    Returns immediately with a job id; poll status_url for progress and the
    final recommendations. Nothing is queued when the body fails validation.
    """
    try:
        job_id = service.submit(body.exam_code, locale)
    except Exception as e:
        logger.error(f"Failed to start exam processing for {body.exam_code}: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": translate("exam_processing_failed", locale)}
        )

    response = ProcessExamResponse(
        success=True,
        message=translate("exam_processing_started", locale),
        data=ProcessExamData(
            job_id=job_id,
            status_url=str(request.url_for("get_exam_job_status", job_id=job_id)),
            estimated_time_seconds=get_config().exam.estimated_time_seconds
        )
    )
    return JSONResponse(status_code=202, content=response.model_dump(mode="json"))


@router.get(
    "/status/{job_id}",
    response_model=JobStatusResponse,
    responses={404: {"model": ErrorResponse}}
)
def get_exam_job_status(
    job_id: str,
    locale: str = Depends(get_locale),
    service: ExamResultsService = Depends(get_exam_results_service)
):
    """
    Get the state of an exam processing job.

    Status values:
    - pending: Job created but not yet picked up by a worker
    - processing: Job is running; progress moves through fixed checkpoints
    - completed: result holds the recommendations (or the scored profile)
    - failed: error_message holds the last error
    """
    try:
        response = service.get_status(job_id, locale)
    except NotFoundError as e:
        # A job id can be polled just before its row commits; never let a 404 be cached.
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "message": e.message},
            headers=NO_CACHE_HEADERS
        )

    return JSONResponse(
        content=response.model_dump(mode="json", exclude_unset=True),
        headers=NO_CACHE_HEADERS
    )
