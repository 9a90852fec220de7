#!/usr/bin/env python3
"""
Submit an exam to a running API server and follow the job until it finishes.

Run with: python scripts/poll_exam_job.py EXAM123456 [--lang ar] [--base-url http://localhost:8080]
"""
import argparse
import json
import sys
import time

import requests

BASE_URL = "http://localhost:8080"


def poll_exam_job(exam_code: str, base_url: str = BASE_URL, lang: str = "en", interval: float = 1.0) -> int:
    print(f"Submitting exam {exam_code} to {base_url}/api/exam-results/process...")
    response = requests.post(
        f"{base_url}/api/exam-results/process",
        json={"exam_code": exam_code},
        params={"lang": lang}
    )
    if response.status_code != 202:
        print(f"Failed to submit exam ({response.status_code}): {response.text}")
        return 1

    data = response.json()["data"]
    job_id = data["job_id"]
    print(f"Job {job_id} accepted, estimated {data['estimated_time_seconds']}s")

    last_step = None
    while True:
        status_resp = requests.get(data["status_url"], params={"lang": lang})
        if status_resp.status_code != 200:
            print(f"Failed to get status: {status_resp.text}")
            return 1

        job = status_resp.json()["data"]
        step = job.get("current_step")
        if step != last_step:
            marker = "~" if job["display_progress_is_estimated"] else ""
            print(f"[{marker}{job['display_progress']:>3}%] {job['status']}: {step}")
            last_step = step

        if job["status"] == "completed":
            print(json.dumps(job["result"], indent=2, ensure_ascii=False))
            return 0
        if job["status"] == "failed":
            print(f"Error: {job['error_message']}")
            return 1

        time.sleep(interval)


def main():
    parser = argparse.ArgumentParser(description="Submit an exam and poll its processing job")
    parser.add_argument('exam_code')
    parser.add_argument('--base-url', default=BASE_URL)
    parser.add_argument('--lang', default='en', choices=['en', 'ar'])
    parser.add_argument('--interval', type=float, default=1.0)

    args = parser.parse_args()
    sys.exit(poll_exam_job(args.exam_code, args.base_url, args.lang, args.interval))


if __name__ == "__main__":
    main()
