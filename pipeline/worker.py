#!/usr/bin/env python3
"""
RQ worker for exam processing jobs.

Each job runs in a forked work-horse that RQ kills at the queue's job
timeout; the failure callback then records the job as failed.

Usage:
    python -m pipeline.worker
    python -m pipeline.worker --burst
    python -m pipeline.worker --max-jobs 100 --verbose
"""

import sys
import argparse
import logging
from typing import List, Optional

from redis import Redis
from rq import Worker

from core.config_loader import get_config
from core.exam.exceptions import ConfigurationError
from pipeline.context import get_worker_context

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def warm_up() -> None:
    """Build the worker context and parse the mapping before the first fork."""
    ctx = get_worker_context()
    try:
        mapping = ctx.exam_service.load_mapping()
        logger.info(f"Reference mapping ready: {len(mapping)} questions")
    except ConfigurationError as e:
        # Jobs will fail with this message until the file is fixed.
        logger.error(f"Reference mapping unavailable: {e.message}")

    client = ctx.recommendation_client
    if not client.enabled:
        logger.warning("AI API disabled; jobs will complete with the scored profile only")
    elif not client.is_available():
        logger.warning(f"AI API at {client.base_url} is not reachable yet; jobs will retry per request")


def start_worker(burst: bool = False, queues: Optional[List[str]] = None, max_jobs: Optional[int] = None):
    queue_config = get_config().queue
    queues = queues or [queue_config.name]

    logger.info(f"Starting exam worker on queues: {', '.join(queues)} (burst={burst}, max_jobs={max_jobs})")

    try:
        redis_conn = Redis.from_url(queue_config.redis_url)
        redis_conn.ping()
    except Exception as e:
        logger.error(f"Cannot reach Redis at {queue_config.redis_url}: {e}")
        sys.exit(1)

    warm_up()

    worker = Worker(queues, connection=redis_conn)
    try:
        worker.work(burst=burst, max_jobs=max_jobs)
    except KeyboardInterrupt:
        logger.info("Worker stopped")
    finally:
        get_worker_context().recommendation_client.close()


def main():
    parser = argparse.ArgumentParser(description='Exam processing worker')
    parser.add_argument('--burst', action='store_true', help='Process queued jobs and exit')
    parser.add_argument('--queues', nargs='+', default=None, help='Queues to listen on (default: from config)')
    parser.add_argument('--max-jobs', type=int, default=None, help='Exit after this many jobs')
    parser.add_argument('--verbose', action='store_true')

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    start_worker(burst=args.burst, queues=args.queues, max_jobs=args.max_jobs)


if __name__ == '__main__':
    main()
