"""Exam job dispatch - Redis Queue, or an in-process thread when the queue is off."""

import logging
import threading

from redis import Redis
from rq import Queue, Callback

from core.config_loader import QueueConfig
from pipeline.exam_runner import process_exam_job, report_job_failure

logger = logging.getLogger(__name__)


class ExamJobDispatcher:
    """
    Hands submitted jobs to workers.

    In async mode jobs go to an RQ queue with a hard runtime ceiling and no
    RQ-level retry (one attempt per job). Otherwise, or when Redis cannot be
    reached at startup, the job runs in a daemon thread of this process.
    """

    def __init__(self, config: QueueConfig):
        self.config = config
        self.redis_conn = None
        self.queue = None
        self.async_mode = False

        if not config.use_async_queue:
            logger.info("Async queue disabled via config. Jobs run in background threads.")
            return

        try:
            self.redis_conn = Redis.from_url(config.redis_url)
            self.redis_conn.ping()
            self.queue = Queue(config.name, connection=self.redis_conn)
            self.async_mode = True
            logger.info(f"Exam job dispatcher connected to Redis queue '{config.name}'")
        except Exception as e:
            logger.error(f"Redis connection failed: {e}. Falling back to background threads.")
            self.redis_conn = None
            self.queue = None

    def dispatch(self, job_id: str, exam_code: str, locale: str) -> str:
        """Queue one job attempt. Returns the job id."""
        if self.async_mode:
            self.queue.enqueue(
                process_exam_job,
                job_id,
                exam_code,
                locale,
                job_id=job_id,
                job_timeout=self.config.job_timeout_seconds,
                result_ttl=self.config.result_ttl_seconds,
                on_failure=Callback(report_job_failure),
            )
            logger.info(f"Queued exam job {job_id} for exam {exam_code}")
        else:
            thread = threading.Thread(
                target=process_exam_job,
                args=(job_id, exam_code, locale),
                name=f"exam-job-{job_id}",
                daemon=True
            )
            thread.start()
            logger.info(f"Started exam job {job_id} for exam {exam_code} in background thread")

        return job_id

    def get_queue_status(self):
        if not self.async_mode:
            return {'status': 'thread_mode', 'queue_length': 0}

        try:
            return {
                'status': 'active',
                'queue_length': len(self.queue),
                'redis_connected': self.redis_conn.ping()
            }
        except Exception as e:
            return {'status': 'error', 'error': str(e)}
