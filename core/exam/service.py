#!/usr/bin/env python3
"""
Exam Result Service - the individual steps the orchestrator runs for a job.

Each step is exposed separately so the orchestrator can report progress
between them:

    enrollment = service.validate_and_get_exam(code, locale)
    answers = service.parse_exam_answers(enrollment, locale)
    mapping = service.load_mapping(locale)
    result, diagnostics = service.process_exam_data(answers, enrollment, mapping)
"""

import json
import logging
from typing import Any, Callable, ContextManager, Dict, Tuple

from core.exam.catalog import DEFAULT_CATALOG, ExamCatalog
from core.exam.exceptions import InvalidDataError, NotFoundError
from core.exam.mapping import get_reference_mapping
from core.exam.messages import translate, DEFAULT_LOCALE
from core.exam.models import ExamScoreResult, ReferenceMapping, ScoringDiagnostics
from core.exam.scorer import score_exam
from database.repositories.exam_enrollment import ExamEnrollment, ExamEnrollmentRepository

logger = logging.getLogger(__name__)


class ExamResultService:
    """Validates, parses and scores exams from the exam platform."""

    def __init__(
        self,
        enrollment_scope: Callable[[], ContextManager[ExamEnrollmentRepository]],
        mapping_file: str,
        catalog: ExamCatalog = DEFAULT_CATALOG,
        mapping_loader: Callable[[str, str], ReferenceMapping] = get_reference_mapping
    ):
        """
        Args:
            enrollment_scope: Factory returning a context manager that yields
                an ExamEnrollmentRepository (one read-only session per call).
            mapping_file: Absolute path of the reference mapping CSV.
            catalog: Branch and environment catalog used for scoring.
            mapping_loader: Callable (path, locale) -> ReferenceMapping.
        """
        self.enrollment_scope = enrollment_scope
        self.mapping_file = mapping_file
        self.catalog = catalog
        self.mapping_loader = mapping_loader

    def validate_and_get_exam(self, exam_code: str, locale: str = DEFAULT_LOCALE) -> ExamEnrollment:
        with self.enrollment_scope() as repo:
            enrollment = repo.get_by_exam_code(exam_code)

        if enrollment is None:
            logger.warning(f"Exam not found: {exam_code}")
            raise NotFoundError(translate("exam_not_found", locale))

        return enrollment

    def parse_exam_answers(self, enrollment: ExamEnrollment, locale: str = DEFAULT_LOCALE) -> Dict[str, Any]:
        """
        Decode the stored answers blob.

        The blob must be a non-empty JSON object of question id -> answer.
        """
        raw = enrollment.answers
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8", errors="replace")

        if isinstance(raw, dict):
            answers = raw
        else:
            try:
                answers = json.loads(raw) if raw else None
            except (TypeError, ValueError) as e:
                logger.warning(f"Unparsable answers for exam {enrollment.exam_code}: {e}")
                raise InvalidDataError(translate("invalid_exam_data", locale)) from e

        if not answers or not isinstance(answers, dict):
            logger.warning(f"Answers for exam {enrollment.exam_code} are empty or not an object")
            raise InvalidDataError(translate("invalid_exam_data", locale))

        return {str(k): v for k, v in answers.items()}

    def load_mapping(self, locale: str = DEFAULT_LOCALE) -> ReferenceMapping:
        return self.mapping_loader(self.mapping_file, locale)

    def process_exam_data(
        self,
        answers: Dict[str, Any],
        enrollment: ExamEnrollment,
        mapping: ReferenceMapping
    ) -> Tuple[ExamScoreResult, ScoringDiagnostics]:
        result, diagnostics = score_exam(
            answers,
            mapping,
            job_title=enrollment.job_title,
            industry=enrollment.industry,
            seniority=enrollment.seniority,
            catalog=self.catalog,
        )

        logger.info(
            f"Scored exam {enrollment.exam_code}: {len(answers)} answers, "
            f"{diagnostics.anomaly_count} anomalies"
        )
        return result, diagnostics
