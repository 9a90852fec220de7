#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class ProcessExamData(BaseModel):
    """Where to poll for a submitted job."""
    job_id: str
    status_url: str
    estimated_time_seconds: int = Field(ge=0)


class ProcessExamResponse(BaseModel):
    """Response returned when an exam job is accepted."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Exam processing started",
                "data": {
                    "job_id": "550e8400-e29b-41d4-a716-446655440000",
                    "status_url": "http://localhost:8080/api/exam-results/status/550e8400-e29b-41d4-a716-446655440000",
                    "estimated_time_seconds": 40
                }
            }
        }
    )

    success: bool
    message: str
    data: ProcessExamData


class JobStatusData(BaseModel):
    """
    Job state as seen by a poller.

    result and completed_at are only present for completed jobs;
    error_message and completed_at only for failed jobs.
    """
    status: str
    progress: int = Field(ge=0, le=100)
    display_progress: int = Field(ge=0, le=100)
    display_progress_is_estimated: bool
    current_step: Optional[str]
    started_at: Optional[datetime]
    result: Optional[Any] = None
    error_message: Optional[str] = None
    completed_at: Optional[datetime] = None


class JobStatusResponse(BaseModel):
    """Response for the job status endpoint."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "data": {
                    "status": "processing",
                    "progress": 25,
                    "display_progress": 53,
                    "display_progress_is_estimated": True,
                    "current_step": "Getting AI recommendations...",
                    "started_at": "2026-02-01T12:00:00+00:00"
                }
            }
        }
    )

    success: bool
    data: JobStatusData


class ErrorResponse(BaseModel):
    """Error body shared by all exam result endpoints."""
    success: bool = False
    message: str
    errors: Optional[Dict[str, List[str]]] = None
