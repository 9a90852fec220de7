"""Business logic services."""

from .exam_results_service import ExamResultsService, build_status_response
