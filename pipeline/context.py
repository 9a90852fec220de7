import contextlib
from dataclasses import dataclass
from functools import lru_cache, partial

from core.ai.recommendation_client import RecommendationClient
from core.config_loader import AppConfig, get_config, resolve_path
from core.exam.service import ExamResultService
from database.database import external_session_scope
from database.repositories.exam_enrollment import ExamEnrollmentRepository
from pipeline.job_store import JobStore


@contextlib.contextmanager
def enrollment_scope(table_name: str):
    """Yield an ExamEnrollmentRepository on a fresh read-only session."""
    with external_session_scope() as session:
        yield ExamEnrollmentRepository(session, table_name)


@dataclass
class ExamContext:
    """Wired dependencies for processing exam jobs.

    Built once per worker process. DB sessions are opened per call by the
    job store and the enrollment scope, never held here.
    """
    config: AppConfig
    exam_service: ExamResultService
    recommendation_client: RecommendationClient
    job_store: JobStore

    @classmethod
    def build(cls, config: AppConfig) -> "ExamContext":
        exam_service = ExamResultService(
            enrollment_scope=partial(enrollment_scope, config.external_database.enrollments_table),
            mapping_file=resolve_path(config.exam.mapping_file),
        )

        return cls(
            config=config,
            exam_service=exam_service,
            recommendation_client=RecommendationClient.from_config(config.ai_api),
            job_store=JobStore(),
        )


@lru_cache()
def get_worker_context() -> ExamContext:
    """Process-wide context for queue workers."""
    return ExamContext.build(get_config())
