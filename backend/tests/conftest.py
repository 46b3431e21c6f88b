"""
Shared fixtures for the quiz kiosk tests.

No MongoDB is needed: model methods are patched with AsyncMock and the
application is started with the database connection stubbed out.
"""
import os
from datetime import datetime
from unittest.mock import AsyncMock

import pytest

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("RAILWAY_ENVIRONMENT", "test")  # skip .env loading

from fastapi.testclient import TestClient

from quiz_kiosk import main
from quiz_kiosk.models.quiz import QuizModel
from quiz_kiosk.models.question import QuestionModel
from quiz_kiosk.models.quiz_attempt import QuizAttemptModel
from quiz_kiosk.utils.jwt_utils import create_access_token


def make_quiz(quiz_id="quiz1", title="Capitals", duration=1, **extra):
    return {
        "id": quiz_id,
        "title": title,
        "description": "Test quiz",
        "duration": duration,
        "questionCount": None,
        "isActive": True,
        "customSuccessMessage": "Well done!",
        **extra,
    }


def make_question(question_id, correct="a", quiz_id="quiz1"):
    return {
        "id": question_id,
        "quizId": quiz_id,
        "text": f"Question {question_id}",
        "imageUrl": None,
        "options": [
            {"id": "a", "text": "A", "isCorrect": correct == "a"},
            {"id": "b", "text": "B", "isCorrect": correct == "b"},
        ],
    }


def make_attempt(attempt_id, score, time_used, quiz_id="quiz1", name=None, total=10, completed_at=None):
    return {
        "id": attempt_id,
        "quizId": quiz_id,
        "participantName": name or f"Player {attempt_id}",
        "score": score,
        "totalQuestions": total,
        "timeUsed": time_used,
        "answers": [],
        "completedAt": completed_at or datetime(2024, 3, 7, 14, 30),
    }


@pytest.fixture
def quiz():
    return make_quiz()


@pytest.fixture
def questions():
    return [make_question("q1", "a"), make_question("q2", "b"), make_question("q3", "a")]


@pytest.fixture
def admin_headers():
    token = create_access_token({"sub": "admin1", "email": "admin@example.com", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def stored_attempts(monkeypatch):
    """In-memory quiz_sessions: QuizAttemptModel.create appends to this list."""
    attempts = []

    async def create(record):
        stored = {**record.model_dump(), "id": f"stored{len(attempts) + 1}", "completedAt": datetime(2024, 3, 7)}
        attempts.append(stored)
        return stored

    async def find_all():
        return list(attempts)

    monkeypatch.setattr(QuizAttemptModel, "create", AsyncMock(side_effect=create))
    monkeypatch.setattr(QuizAttemptModel, "find_all", AsyncMock(side_effect=find_all))
    return attempts


@pytest.fixture
def catalogue(monkeypatch, quiz, questions):
    """One active quiz with three questions."""
    async def find_by_id(quiz_id):
        return quiz if quiz_id == quiz["id"] else None

    async def find_by_quiz(quiz_id):
        return questions if quiz_id == quiz["id"] else []

    monkeypatch.setattr(QuizModel, "find_by_id", AsyncMock(side_effect=find_by_id))
    monkeypatch.setattr(QuizModel, "find_all", AsyncMock(return_value=[quiz]))
    monkeypatch.setattr(QuestionModel, "find_by_quiz", AsyncMock(side_effect=find_by_quiz))
    monkeypatch.setattr(QuestionModel, "find_all", AsyncMock(return_value=questions))
    monkeypatch.setattr(QuestionModel, "count_by_quiz", AsyncMock(return_value={quiz["id"]: len(questions)}))
    return quiz


@pytest.fixture
def client(monkeypatch):
    """TestClient running the app lifespan without a database."""
    monkeypatch.setattr(main, "connect_to_mongo", AsyncMock())
    monkeypatch.setattr(main, "close_mongo_connection", AsyncMock())
    with TestClient(main.app) as test_client:
        yield test_client
