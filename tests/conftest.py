# conftest.py
import json
import os
import tempfile

import pytest

# The app reads its settings at import time, so these must be set first.
_TMP = tempfile.mkdtemp(prefix="quizgen-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["GOOGLE_API_KEY"] = "test-key-123"
os.environ["LOG_LEVEL"] = "ERROR"

from quizgen import models  # noqa: E402
from quizgen.db import Base, get_session, init_db  # noqa: E402

SAMPLE_TEXT = (
    "Photosynthesis is the process by which green plants use sunlight, water and carbon dioxide "
    "to produce glucose and oxygen. It takes place mainly in the chloroplasts of leaf cells. "
)


def make_reply(count=5, fenced=False):
    questions = [
        {
            "question": f"Question {i}?",
            "options": [f"Q{i} option A", f"Q{i} option B", f"Q{i} option C", f"Q{i} option D"],
            "correctAnswer": i % 4,
            "explanation": f"Because of reason {i}.",
            "diveDeeper": f"A much longer discussion of question {i}.",
        }
        for i in range(1, count + 1)
    ]
    text = json.dumps({"questions": questions})
    return f"```json\n{text}\n```" if fenced else text


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from quizgen.main import app

    return TestClient(app)


@pytest.fixture(autouse=True)
def clean_db():
    init_db()
    yield
    with get_session() as db:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()


@pytest.fixture
def db():
    with get_session() as session:
        yield session


@pytest.fixture
def fake_pdf(monkeypatch):
    """Replaces PDF extraction; set `.text` to control what comes back."""
    import quizgen.main

    class FakePDF:
        text = SAMPLE_TEXT * 3
        calls = []

    def extract(data):
        FakePDF.calls.append(data)
        return FakePDF.text

    monkeypatch.setattr(quizgen.main, "extract_pdf_text", extract)
    return FakePDF


@pytest.fixture
def fake_gemini(monkeypatch):
    """Replaces the Gemini call; records prompts and returns `.reply`."""
    import quizgen.llm

    class FakeGemini:
        reply = make_reply()
        prompts = []

    def complete(prompt_text):
        FakeGemini.prompts.append(prompt_text)
        return FakeGemini.reply

    monkeypatch.setattr(quizgen.llm, "_complete", complete)
    return FakeGemini


@pytest.fixture
def upload_id(client, fake_pdf):
    resp = client.post(
        "/api/upload",
        files={"file": ("notes.pdf", b"%PDF-1.4 fake", "application/pdf")},
    )
    assert resp.status_code == 200
    return resp.json()["data"]["uploadId"]


@pytest.fixture
def quiz(client, upload_id, fake_gemini):
    resp = client.post("/api/quiz/generate", json={"uploadId": upload_id})
    assert resp.status_code == 200
    return resp.json()["data"]
