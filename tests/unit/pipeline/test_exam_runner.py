import contextlib
import json
import unittest
from unittest.mock import MagicMock, patch

import pytest
import requests

from core.ai.recommendation_client import RecommendationClient
from core.config_loader import AppConfig
from core.exam.service import ExamResultService
from database.models import JOB_STATUS_COMPLETED, JOB_STATUS_FAILED
from database.repositories.exam_enrollment import ExamEnrollment
from pipeline.context import ExamContext
from pipeline.exam_runner import run_exam_job, process_exam_job, report_job_failure
from pipeline.job_store import JobStore
from tests import SAMPLE_MAPPING_FILE, create_test_engine, make_uow_factory

ANSWERS = {"10001": 1, "10002": 1, "10003": 1, "10004": 1, "10005": 1, "50001": 1, "50002": 1}


def make_response(status_code, body):
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(body).encode("utf-8")
    response.headers["Content-Type"] = "application/json"
    return response


@pytest.mark.db
class TestRunExamJob(unittest.TestCase):

    def setUp(self):
        self.engine = create_test_engine()
        self.store = JobStore(uow_factory=make_uow_factory(self.engine))
        self.enrollments = {
            "EXAM1": ExamEnrollment(
                exam_code="EXAM1",
                answers=json.dumps(ANSWERS),
                job_title="Engineer",
                industry="Tech",
                seniority="Junior"
            ),
            "BROKEN": ExamEnrollment(exam_code="BROKEN", answers="{not json"),
        }
        self.session = MagicMock()
        self.session.headers = {}

    def tearDown(self):
        self.engine.dispose()

    def _context(self, ai_enabled=True):
        repo = MagicMock()
        repo.get_by_exam_code.side_effect = self.enrollments.get

        @contextlib.contextmanager
        def scope():
            yield repo

        return ExamContext(
            config=AppConfig(),
            exam_service=ExamResultService(enrollment_scope=scope, mapping_file=SAMPLE_MAPPING_FILE),
            recommendation_client=RecommendationClient(
                base_url="http://ai.local",
                enabled=ai_enabled,
                retry_attempts=3,
                backoff_seconds=0,
                session=self.session
            ),
            job_store=self.store,
        )

    def _submit(self, exam_code, job_id="job-1"):
        self.store.create(job_id, exam_code)
        return job_id

    def test_unknown_exam_fails_job(self):
        job_id = self._submit("EXAM123456")

        status = run_exam_job(self._context(), job_id, "EXAM123456")

        self.assertEqual(status, JOB_STATUS_FAILED)
        job = self.store.get(job_id)
        self.assertEqual(job.status, JOB_STATUS_FAILED)
        self.assertEqual(job.error_message, "Exam not found")
        self.assertEqual(job.progress, 5)
        self.assertIsNone(job.result)
        self.assertIsNotNone(job.completed_at)
        self.session.post.assert_not_called()

    def test_invalid_answers_fail_job(self):
        job_id = self._submit("BROKEN")

        run_exam_job(self._context(), job_id, "BROKEN")

        job = self.store.get(job_id)
        self.assertEqual(job.status, JOB_STATUS_FAILED)
        self.assertEqual(job.error_message, "Invalid exam data")
        self.assertEqual(job.progress, 10)

    def test_disabled_ai_completes_with_scored_profile(self):
        job_id = self._submit("EXAM1")

        status = run_exam_job(self._context(ai_enabled=False), job_id, "EXAM1")

        self.assertEqual(status, JOB_STATUS_COMPLETED)
        job = self.store.get(job_id)
        self.assertEqual(job.status, JOB_STATUS_COMPLETED)
        self.assertEqual(job.progress, 100)
        self.assertIsNone(job.error_message)
        self.assertEqual(job.result["job_title"], "Engineer")
        self.assertEqual(
            job.result["selected_branches"][0],
            {"job_type": "Open Thinking Jobs", "chosen_competencies": [1, 0, 0, 0, 0]}
        )
        self.assertEqual(job.result["environment_status"][0], {"question": 1, "selected_option": 1})
        self.session.post.assert_not_called()

    def test_ai_response_stored_verbatim(self):
        body = {"recommendations": [{"title": "Research Assistant"}], "model": "v2"}
        self.session.post.return_value = make_response(200, body)
        job_id = self._submit("EXAM1")

        run_exam_job(self._context(), job_id, "EXAM1")

        job = self.store.get(job_id)
        self.assertEqual(job.status, JOB_STATUS_COMPLETED)
        self.assertEqual(job.result, body)
        sent = self.session.post.call_args.kwargs["json"]
        self.assertEqual(len(sent["selected_branches"]), 16)

    def test_ai_http_500_fails_after_retries(self):
        self.session.post.return_value = make_response(500, {"message": "model offline"})
        job_id = self._submit("EXAM1")

        status = run_exam_job(self._context(), job_id, "EXAM1")

        self.assertEqual(status, JOB_STATUS_FAILED)
        self.assertEqual(self.session.post.call_count, 4)
        job = self.store.get(job_id)
        self.assertEqual(job.error_message, "AI API error (HTTP 500): model offline")
        self.assertEqual(job.progress, 25)
        self.assertIsNone(job.result)

    def test_checkpoint_sequence(self):
        job_id = self._submit("EXAM1")
        seen = []
        real_update = self.store.update_progress

        def record(jid, progress, step):
            seen.append(progress)
            return real_update(jid, progress, step)

        with patch.object(self.store, "update_progress", side_effect=record):
            run_exam_job(self._context(ai_enabled=False), job_id, "EXAM1")

        self.assertEqual(seen, [0, 5, 10, 15, 20, 25, 90, 95])
        self.assertEqual(self.store.get(job_id).progress, 100)

    def test_step_labels_and_errors_follow_locale(self):
        job_id = self._submit("EXAM123456")
        steps = []
        real_update = self.store.update_progress

        def record(jid, progress, step):
            steps.append(step)
            return real_update(jid, progress, step)

        with patch.object(self.store, "update_progress", side_effect=record):
            run_exam_job(self._context(), job_id, "EXAM123456", locale="ar")

        self.assertEqual(steps[0], "جارٍ بدء معالجة الامتحان...")
        self.assertEqual(self.store.get(job_id).error_message, "الامتحان غير موجود")

    def test_vanished_job_abandoned(self):
        status = run_exam_job(self._context(), "never-created", "EXAM1")

        self.assertIsNone(status)
        self.assertIsNone(self.store.get("never-created"))

    def test_terminal_job_not_reprocessed(self):
        job_id = self._submit("EXAM1")
        self.store.mark_processing(job_id)
        self.store.mark_failed(job_id, "earlier failure")

        status = run_exam_job(self._context(), job_id, "EXAM1")

        self.assertEqual(status, JOB_STATUS_FAILED)
        self.assertEqual(self.store.get(job_id).error_message, "earlier failure")
        self.session.post.assert_not_called()

    def test_unexpected_exception_recorded(self):
        job_id = self._submit("EXAM1")
        ctx = self._context()
        ctx.recommendation_client = MagicMock()
        ctx.recommendation_client.get_recommendations.side_effect = RuntimeError()

        status = run_exam_job(ctx, job_id, "EXAM1")

        self.assertEqual(status, JOB_STATUS_FAILED)
        self.assertEqual(self.store.get(job_id).error_message, "RuntimeError")

    def test_process_exam_job_accepts_context(self):
        job_id = self._submit("EXAM1")

        status = process_exam_job(job_id, "EXAM1", "en", ctx=self._context(ai_enabled=False))

        self.assertEqual(status, JOB_STATUS_COMPLETED)


@pytest.mark.db
class TestReportJobFailure(unittest.TestCase):

    def setUp(self):
        self.engine = create_test_engine()
        self.store = JobStore(uow_factory=make_uow_factory(self.engine))
        self.ctx = MagicMock(job_store=self.store)

    def tearDown(self):
        self.engine.dispose()

    def test_records_failure_for_dead_work_horse(self):
        self.store.create("job-1", "EXAM1")
        self.store.mark_processing("job-1")
        rq_job = MagicMock(args=("job-1", "EXAM1", "en"))

        with patch("pipeline.exam_runner.get_worker_context", return_value=self.ctx):
            report_job_failure(rq_job, None, TimeoutError, TimeoutError("Task exceeded maximum timeout value (90 seconds)"), None)

        job = self.store.get("job-1")
        self.assertEqual(job.status, JOB_STATUS_FAILED)
        self.assertEqual(job.error_message, "Task exceeded maximum timeout value (90 seconds)")

    def test_completed_job_left_alone(self):
        self.store.create("job-1", "EXAM1")
        self.store.mark_processing("job-1")
        self.store.mark_completed("job-1", {"ok": True})
        rq_job = MagicMock(args=("job-1", "EXAM1", "en"))

        with patch("pipeline.exam_runner.get_worker_context", return_value=self.ctx):
            report_job_failure(rq_job, None, RuntimeError, RuntimeError("late"), None)

        self.assertEqual(self.store.get("job-1").status, JOB_STATUS_COMPLETED)


if __name__ == '__main__':
    unittest.main()
