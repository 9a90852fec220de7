#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field


class ProcessExamRequest(BaseModel):
    """Request to start processing an exam."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={"example": {"exam_code": "EXAM123456"}}
    )

    exam_code: str = Field(..., min_length=1, max_length=255, description="Exam code on the exam platform")
