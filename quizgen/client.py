# client.py
import os
import logging
from typing import List, Optional

import requests
from dotenv import load_dotenv

from quizgen.schemas import DEFAULT_QUESTION_COUNT

load_dotenv()

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("QUIZGEN_API_URL", "http://localhost:8000/api").rstrip("/")

# Gemini can take a while on long prompts
TIMEOUT = 120


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ApiClient:
    """Thin wrapper over the QuizGen HTTP API; returns the envelope's `data`."""

    def __init__(self, base_url: str = API_BASE_URL, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.http = session or requests.Session()

    def upload_pdf(self, path: str) -> dict:
        with open(path, "rb") as fh:
            files = {"file": (os.path.basename(path), fh, "application/pdf")}
            return self._request("POST", "/upload", "Upload failed", files=files)

    def generate_quiz(self, upload_id: int, question_count: int = DEFAULT_QUESTION_COUNT) -> dict:
        body = {"uploadId": upload_id, "questionCount": question_count}
        return self._request("POST", "/quiz/generate", "Quiz generation failed", json=body)

    def get_quiz(self, quiz_id: int) -> dict:
        return self._request("GET", f"/quiz/{quiz_id}", "Failed to fetch quiz")

    def submit_quiz(self, quiz_id: int, answers: List[dict]) -> dict:
        return self._request("POST", f"/quiz/{quiz_id}/submit", "Failed to submit quiz", json={"answers": answers})

    def _request(self, method: str, path: str, fallback_error: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.request(method, url, timeout=TIMEOUT, **kwargs)
        except requests.RequestException as e:
            logger.debug("%s %s failed: %s", method, url, e)
            raise ApiError(f"{fallback_error}: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = {}

        if not resp.ok or not body.get("success"):
            raise ApiError(body.get("error") or fallback_error, resp.status_code)
        return body["data"]
