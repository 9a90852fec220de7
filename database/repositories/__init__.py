from database.repositories.base import BaseRepository
from database.repositories.exam_job import ExamJobRepository
from database.repositories.exam_enrollment import ExamEnrollmentRepository, ExamEnrollment

__all__ = [
    'BaseRepository',
    'ExamJobRepository',
    'ExamEnrollmentRepository',
    'ExamEnrollment',
]
