"""Transaction scope for exam job rows."""

import contextlib
from typing import Iterator

from database.database import SessionLocal, get_engine
from database.repositories.exam_job import ExamJobRepository


@contextlib.contextmanager
def exam_uow() -> Iterator[ExamJobRepository]:
    """One transaction around a single job state transition.

    The job store opens a fresh scope for every create, claim, progress
    write and terminal write, so the worker and the status endpoint never
    share a session. A transition refused because the job is already
    terminal changes nothing and still commits; an exception rolls the
    whole transition back.

        with exam_uow() as repo:
            repo.mark_failed(job_id, "AI API request failed: timeout")
    """
    get_engine()
    session = SessionLocal()
    try:
        yield ExamJobRepository(session)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
