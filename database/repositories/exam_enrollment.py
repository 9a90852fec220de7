import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select, table, column
from sqlalchemy.orm import Session

from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExamEnrollment:
    """Exam record from the exam platform, as stored there."""
    exam_code: str
    answers: Optional[str]
    job_title: Optional[str] = None
    industry: Optional[str] = None
    seniority: Optional[str] = None


class ExamEnrollmentRepository(BaseRepository):
    """Read-only access to the exam platform's enrollment table."""

    def __init__(self, db: Session, table_name: str = "exam_enrollments"):
        super().__init__(db)
        self.enrollments = table(
            table_name,
            column("exam_code"),
            column("answers"),
            column("job_title"),
            column("industry"),
            column("seniority"),
        )

    def get_by_exam_code(self, exam_code: str) -> Optional[ExamEnrollment]:
        t = self.enrollments
        stmt = (
            select(t.c.exam_code, t.c.answers, t.c.job_title, t.c.industry, t.c.seniority)
            .where(t.c.exam_code == exam_code)
            .limit(1)
        )
        row = self.db.execute(stmt).first()
        if row is None:
            return None
        return ExamEnrollment(
            exam_code=row.exam_code,
            answers=row.answers,
            job_title=row.job_title,
            industry=row.industry,
            seniority=row.seniority,
        )
