from typing import List, Optional
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, Field
from ..database.connection import get_database, serialize_document, QUIZ_SESSIONS
from ..services.change_feed import change_feed


class AttemptAnswer(BaseModel):
    questionId: str
    selectedOptionId: str
    isCorrect: bool


class QuizAttemptCreate(BaseModel):
    quizId: str
    participantId: Optional[str] = None
    participantName: str = Field(..., min_length=1)
    score: int = Field(..., ge=0)
    totalQuestions: int = Field(..., ge=0)
    timeUsed: int = Field(..., ge=0)  # in seconds
    answers: List[AttemptAnswer] = []


class QuizAttempt(QuizAttemptCreate):
    id: str
    completedAt: datetime


class QuizAttemptModel:
    """Completed quiz runs ("quiz sessions"); insert and delete only."""

    @staticmethod
    async def create(attempt: QuizAttemptCreate) -> dict:
        """Store a completed attempt"""
        database = get_database()
        if database is None:
            raise Exception("Database not connected")

        attempt_data = attempt.model_dump()
        attempt_data["completedAt"] = datetime.now()

        result = await database[QUIZ_SESSIONS].insert_one(attempt_data)
        attempt_data["_id"] = result.inserted_id
        stored = serialize_document(attempt_data)

        print(f"🏁 Attempt stored: {stored['id']} ({stored['participantName']} {stored['score']}/{stored['totalQuestions']})")
        await change_feed.publish(QUIZ_SESSIONS, "insert", stored["id"])
        return stored

    @staticmethod
    async def find_by_id(attempt_id: str) -> Optional[dict]:
        database = get_database()
        if database is None:
            return None
        try:
            attempt = await database[QUIZ_SESSIONS].find_one({"_id": ObjectId(attempt_id)})
        except (InvalidId, TypeError):
            return None
        return serialize_document(attempt)

    @staticmethod
    async def find_all() -> List[dict]:
        """Every stored attempt in insertion order"""
        database = get_database()
        if database is None:
            return []

        attempts = []
        async for attempt in database[QUIZ_SESSIONS].find().sort("_id", 1):
            attempts.append(serialize_document(attempt))
        return attempts

    @staticmethod
    async def find_by_quiz(quiz_id: str) -> List[dict]:
        database = get_database()
        if database is None:
            return []

        attempts = []
        async for attempt in database[QUIZ_SESSIONS].find({"quizId": quiz_id}).sort("_id", 1):
            attempts.append(serialize_document(attempt))
        return attempts

    @staticmethod
    async def delete_by_quiz(quiz_id: str) -> int:
        """Clear a quiz's leaderboard; returns how many attempts were removed"""
        database = get_database()
        if database is None:
            return 0

        result = await database[QUIZ_SESSIONS].delete_many({"quizId": quiz_id})
        print(f"🧹 Cleared {result.deleted_count} leaderboard entries for quiz {quiz_id}")
        if result.deleted_count:
            await change_feed.publish(QUIZ_SESSIONS, "delete", None)
        return result.deleted_count
