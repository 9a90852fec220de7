#!/usr/bin/env python3
"""
Exam Results API - FastAPI Application

Accepts exams for background processing and reports job progress.

Usage:
    python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from core.config_loader import get_config
from core.exam.exceptions import ExamProcessingError
from .exceptions import (
    validation_exception_handler,
    exam_processing_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from .routers import exam_results_router
from .routers.exam_results import add_rate_limit_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Exam Results API",
        description="Scores exams and fetches job recommendations in the background",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    add_rate_limit_handlers(app)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ExamProcessingError, exam_processing_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(exam_results_router)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "exam-results"}

    return app


app = create_app()


def main():
    """Run the web server."""
    import uvicorn

    config = get_config()
    logger.info(f"Starting Exam Results API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
