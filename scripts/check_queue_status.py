#!/usr/bin/env python3
"""
Report on exam processing jobs and the worker queue.

Run with: python scripts/check_queue_status.py

Example usage:
    python scripts/check_queue_status.py
    python scripts/check_queue_status.py --hours 1 --limit 20
"""
import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Ensure we can import from the project root
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from core.config_loader import get_config
from database.models import JOB_STATUS_COMPLETED, JOB_STATUS_FAILED
from database.uow import exam_uow
from pipeline.queue import ExamJobDispatcher

logger = logging.getLogger(__name__)

PENDING_WARN_AFTER = timedelta(minutes=5)
FINISHED_STATUSES = (JOB_STATUS_COMPLETED, JOB_STATUS_FAILED)


def print_section(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(title)
    print(f"{'=' * 60}")


def report(hours: int, limit: int, uow_factory=exam_uow) -> int:
    """
    Print the report.

    Pending and processing jobs are counted over all time; finished jobs only
    within the last `hours`.

    Returns:
        Number of stuck jobs (stale processing plus long-pending).
    """
    config = get_config()
    since = datetime.now(timezone.utc) - timedelta(hours=hours)
    stale_after = timedelta(seconds=config.queue.job_timeout_seconds * 2)

    with uow_factory() as repo:
        counts = repo.count_by_status(since=since, windowed_statuses=FINISHED_STATUSES)
        recent = repo.list_recent(limit=limit)
        stale = repo.list_stale_processing(stale_after)
        waiting = repo.list_stale_pending(PENDING_WARN_AFTER)

        print_section(f"Job counts (finished jobs from the last {hours}h)")
        for status, count in counts.items():
            print(f"  {status:<12} {count}")

        print_section(f"Latest {len(recent)} jobs")
        for job in recent:
            line = f"  {job.job_id}  {job.exam_code:<20} {job.status:<11} {job.progress:>3}%"
            if job.error_message:
                line += f"  error={job.error_message[:80]}"
            print(line)

        print_section(f"Processing jobs silent for more than {int(stale_after.total_seconds())}s")
        if not stale:
            print("  none")
        for job in stale:
            print(f"  {job.job_id}  {job.exam_code:<20} step={job.current_step} updated_at={job.updated_at}")

        print_section(f"Pending jobs older than {int(PENDING_WARN_AFTER.total_seconds() // 60)} minutes")
        if not waiting:
            print("  none")
        else:
            print(f"  WARNING: {len(waiting)} job(s) still pending. Queue worker may not be running.")
        for job in waiting:
            print(f"  {job.job_id}  {job.exam_code:<20} created_at={job.created_at}")

    queue_status = ExamJobDispatcher(config.queue).get_queue_status()
    print_section("Queue")
    for key, value in queue_status.items():
        print(f"  {key}: {value}")

    return len(stale) + len(waiting)


def main():
    parser = argparse.ArgumentParser(description="Report on exam processing jobs and the worker queue")
    parser.add_argument('--hours', type=int, default=24, help='Window for completed/failed counts (default: 24)')
    parser.add_argument('--limit', type=int, default=10, help='Number of recent jobs to list (default: 10)')
    parser.add_argument('--verbose', action='store_true')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    stuck = report(args.hours, args.limit)
    sys.exit(1 if stuck else 0)


if __name__ == '__main__':
    main()
