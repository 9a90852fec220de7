"""Asynchronous exam processing: job store, runner, dispatch and progress view."""

from pipeline.job_store import JobStore
from pipeline.progress import display_progress, CHECKPOINTS
from pipeline.exam_runner import run_exam_job, process_exam_job

__all__ = ['JobStore', 'display_progress', 'CHECKPOINTS', 'run_exam_job', 'process_exam_job']
