#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests
    python -m pytest tests/ -v

    # Using unittest
    python -m unittest discover tests -v

Job store tests use an in-memory SQLite database, so no external services
are needed. Redis and the recommendation API are always mocked.
"""

import contextlib
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.models import Base
from database.repositories.exam_job import ExamJobRepository

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SAMPLE_MAPPING_FILE = os.path.join(PROJECT_ROOT, "data", "AcademicFinderAlgorithm.csv")


def create_test_engine():
    """In-memory SQLite engine shared by every session (single connection)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    return engine


def make_uow_factory(engine):
    """
    Build an exam_uow equivalent bound to the given engine.

    Usage:
        store = JobStore(uow_factory=make_uow_factory(create_test_engine()))
    """
    session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    @contextlib.contextmanager
    def uow():
        session = session_factory()
        try:
            yield ExamJobRepository(session)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return uow


def write_mapping_csv(path, rows, header=("code", "Title", "Reference", "Question")):
    """Write a mapping CSV with the given rows (tuples of strings)."""
    import csv

    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        if header:
            writer.writerow(header)
        writer.writerows(rows)
    return str(path)
