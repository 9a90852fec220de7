#!/usr/bin/env python3
"""
Unit tests for the exam results endpoints.
Tests POST /api/exam-results/process and GET /api/exam-results/status/{job_id}.
"""

import unittest
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from database.models import JOB_STATUS_PENDING, JOB_STATUS_FAILED
from pipeline.job_store import JobStore
from tests import create_test_engine, make_uow_factory
from web.backend.app import create_app
from web.backend.dependencies import get_dispatcher, get_job_store
from web.backend.routers.exam_results import limiter

NO_STORE = "no-store, no-cache, must-revalidate, max-age=0"


@pytest.mark.db
class ExamResultsApiTestCase(unittest.TestCase):

    def setUp(self):
        # Disable rate limiting for tests
        limiter.enabled = False

        self.engine = create_test_engine()
        self.store = JobStore(uow_factory=make_uow_factory(self.engine))
        self.dispatcher = MagicMock()

        self.app = create_app()
        self.app.dependency_overrides[get_job_store] = lambda: self.store
        self.app.dependency_overrides[get_dispatcher] = lambda: self.dispatcher
        self.client = TestClient(self.app, raise_server_exceptions=False)

    def tearDown(self):
        self.app.dependency_overrides.clear()
        self.engine.dispose()
        limiter.enabled = True

    def _job_count(self):
        uow = make_uow_factory(self.engine)
        with uow() as repo:
            return sum(repo.count_by_status().values())


class TestProcessExamEndpoint(ExamResultsApiTestCase):

    def test_accepts_exam(self):
        response = self.client.post("/api/exam-results/process", json={"exam_code": "EXAM123456"})

        self.assertEqual(response.status_code, 202)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Exam processing started")

        job_id = body["data"]["job_id"]
        self.assertEqual(len(job_id), 36)
        self.assertTrue(body["data"]["status_url"].endswith(f"/api/exam-results/status/{job_id}"))
        self.assertEqual(body["data"]["estimated_time_seconds"], 40)

        self.dispatcher.dispatch.assert_called_once_with(job_id, "EXAM123456", "en")
        job = self.store.get(job_id)
        self.assertEqual(job.status, JOB_STATUS_PENDING)
        self.assertEqual(job.progress, 0)
        self.assertEqual(job.exam_code, "EXAM123456")

    def test_locale_from_query(self):
        response = self.client.post("/api/exam-results/process?lang=ar", json={"exam_code": "EXAM1"})

        self.assertEqual(response.status_code, 202)
        self.assertEqual(response.json()["message"], "بدأت معالجة الامتحان")
        self.assertEqual(self.dispatcher.dispatch.call_args[0][2], "ar")

    def test_locale_from_accept_language(self):
        response = self.client.post(
            "/api/exam-results/process",
            json={"exam_code": "EXAM1"},
            headers={"Accept-Language": "ar-EG,ar;q=0.9"}
        )

        self.assertEqual(response.status_code, 202)
        self.assertEqual(self.dispatcher.dispatch.call_args[0][2], "ar")

    def test_unsupported_locale_uses_default(self):
        self.client.post("/api/exam-results/process?lang=fr", json={"exam_code": "EXAM1"})
        self.assertEqual(self.dispatcher.dispatch.call_args[0][2], "en")

    def test_each_submission_gets_new_job(self):
        first = self.client.post("/api/exam-results/process", json={"exam_code": "EXAM1"}).json()
        second = self.client.post("/api/exam-results/process", json={"exam_code": "EXAM1"}).json()

        self.assertNotEqual(first["data"]["job_id"], second["data"]["job_id"])
        self.assertEqual(self._job_count(), 2)

    def test_rejects_invalid_exam_codes(self):
        for payload in ({"exam_code": ""}, {"exam_code": "   "}, {"exam_code": "X" * 256}, {}, {"exam_code": 123}):
            with self.subTest(payload=payload):
                response = self.client.post("/api/exam-results/process", json=payload)

                self.assertEqual(response.status_code, 422)
                body = response.json()
                self.assertFalse(body["success"])
                self.assertEqual(body["message"], "Validation error")
                self.assertIn("exam_code", body["errors"])
                self.assertTrue(body["errors"]["exam_code"])

        self.dispatcher.dispatch.assert_not_called()
        self.assertEqual(self._job_count(), 0)

    def test_validation_message_localized(self):
        response = self.client.post("/api/exam-results/process?lang=ar", json={"exam_code": ""})

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["message"], "خطأ في التحقق")

    def test_dispatch_failure_returns_500(self):
        self.dispatcher.dispatch.side_effect = RuntimeError("redis went away")

        response = self.client.post("/api/exam-results/process", json={"exam_code": "EXAM1"})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"success": False, "message": "Failed to start exam processing"})

        uow = make_uow_factory(self.engine)
        with uow() as repo:
            jobs = repo.list_recent()
        self.assertEqual(len(jobs), 1)
        self.assertEqual(jobs[0].status, JOB_STATUS_FAILED)
        self.assertEqual(jobs[0].error_message, "redis went away")


class TestJobStatusEndpoint(ExamResultsApiTestCase):

    def test_unknown_job(self):
        response = self.client.get("/api/exam-results/status/does-not-exist")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"success": False, "message": "Job not found"})
        self.assertEqual(response.headers["cache-control"], NO_STORE)
        self.assertEqual(response.headers["pragma"], "no-cache")

    def test_unknown_job_localized(self):
        response = self.client.get("/api/exam-results/status/does-not-exist?lang=ar")
        self.assertEqual(response.json()["message"], "المهمة غير موجودة")

    def test_pending_job(self):
        self.store.create("job-1", "EXAM1")

        response = self.client.get("/api/exam-results/status/job-1")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["cache-control"], NO_STORE)
        self.assertEqual(response.headers["pragma"], "no-cache")
        self.assertEqual(response.json(), {
            "success": True,
            "data": {
                "status": "pending",
                "progress": 0,
                "display_progress": 0,
                "display_progress_is_estimated": False,
                "current_step": None,
                "started_at": None,
            }
        })

    def test_processing_job_waiting_on_ai_is_estimated(self):
        self.store.create("job-1", "EXAM1")
        self.store.mark_processing("job-1")
        self.store.update_progress("job-1", 25, "Getting AI recommendations...")

        data = self.client.get("/api/exam-results/status/job-1").json()["data"]

        self.assertEqual(data["status"], "processing")
        self.assertEqual(data["progress"], 25)
        self.assertTrue(data["display_progress_is_estimated"])
        self.assertGreaterEqual(data["display_progress"], 25)
        self.assertLessEqual(data["display_progress"], 90)
        self.assertIsNotNone(data["started_at"])
        self.assertNotIn("result", data)

    def test_completed_job(self):
        self.store.create("job-1", "EXAM1")
        self.store.mark_processing("job-1")
        self.store.mark_completed("job-1", {"recommendations": ["Data Analyst"]})

        response = self.client.get("/api/exam-results/status/job-1")
        body = response.json()

        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["status"], "completed")
        self.assertEqual(body["data"]["progress"], 100)
        self.assertEqual(body["data"]["result"], {"recommendations": ["Data Analyst"]})
        self.assertIsNotNone(body["data"]["completed_at"])
        self.assertNotIn("error_message", body["data"])
        self.assertEqual(response.headers["cache-control"], NO_STORE)

    def test_failed_job(self):
        self.store.create("job-1", "EXAM123456")
        self.store.mark_processing("job-1")
        self.store.update_progress("job-1", 5, "Validating exam...")
        self.store.mark_failed("job-1", "Exam not found")

        body = self.client.get("/api/exam-results/status/job-1").json()

        self.assertFalse(body["success"])
        self.assertEqual(body["data"]["status"], "failed")
        self.assertEqual(body["data"]["progress"], 5)
        self.assertEqual(body["data"]["error_message"], "Exam not found")
        self.assertIsNotNone(body["data"]["completed_at"])
        self.assertNotIn("result", body["data"])


class TestHealthEndpoint(unittest.TestCase):

    def test_health(self):
        client = TestClient(create_app())
        response = client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")


if __name__ == '__main__':
    unittest.main()
