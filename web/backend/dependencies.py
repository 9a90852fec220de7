#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Query, Request

from core.config_loader import get_config
from core.exam.messages import normalize_locale
from pipeline.job_store import JobStore
from pipeline.queue import ExamJobDispatcher
from .services.exam_results_service import ExamResultsService


@lru_cache()
def get_job_store() -> JobStore:
    return JobStore()


@lru_cache()
def get_dispatcher() -> ExamJobDispatcher:
    """Process-wide dispatcher; connects to Redis on first use."""
    return ExamJobDispatcher(get_config().queue)


def get_exam_results_service(
    job_store: JobStore = Depends(get_job_store),
    dispatcher: ExamJobDispatcher = Depends(get_dispatcher)
) -> ExamResultsService:
    """
    Usage:
        @router.post("/process")
        def process(service: ExamResultsService = Depends(get_exam_results_service)):
            ...
    """
    return ExamResultsService(job_store, dispatcher)


def resolve_locale(request: Request, lang: Optional[str] = None) -> str:
    """Locale from the lang parameter, else Accept-Language, else the configured default."""
    exam_config = get_config().exam
    requested = lang or request.query_params.get("lang") or request.headers.get("accept-language")
    return normalize_locale(
        requested,
        supported=tuple(exam_config.supported_locales),
        default=exam_config.default_locale
    )


def get_locale(
    request: Request,
    lang: Optional[str] = Query(None, description="Response language (en or ar)")
) -> str:
    return resolve_locale(request, lang)
