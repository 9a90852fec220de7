"""API route handlers."""

from .exam_results import router as exam_results_router
