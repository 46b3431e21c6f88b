from typing import Dict, Optional, Any, List
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, Field
from ..database.connection import get_database, serialize_document, QUIZZES
from ..services.change_feed import change_feed

DEFAULT_QUIZ_DURATION = 10  # minutes


class QuizCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    duration: int = Field(DEFAULT_QUIZ_DURATION, ge=1)  # minutes
    questionCount: Optional[int] = Field(None, ge=1)  # cap on questions served per attempt
    isActive: bool = True
    customSuccessMessage: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "title": "World Capitals",
                "description": "How well do you know the map?",
                "duration": 5,
                "isActive": True,
                "customSuccessMessage": "Great job, explorer!"
            }
        }


class Quiz(QuizCreate):
    id: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class QuizModel:
    @staticmethod
    async def find_by_id(quiz_id: str) -> Optional[Dict[str, Any]]:
        """Find quiz by ID"""
        database = get_database()
        if database is None:
            return None
        try:
            quiz = await database[QUIZZES].find_one({"_id": ObjectId(quiz_id)})
        except (InvalidId, TypeError):
            return None
        return serialize_document(quiz)

    @staticmethod
    async def find_all(active_only: bool = False) -> List[Dict[str, Any]]:
        """Find all quizzes, optionally only the ones open to participants"""
        database = get_database()
        if database is None:
            return []

        query = {"isActive": True} if active_only else {}
        quizzes = []
        async for quiz in database[QUIZZES].find(query).sort("createdAt", 1):
            quizzes.append(serialize_document(quiz))
        return quizzes

    @staticmethod
    async def count() -> int:
        database = get_database()
        if database is None:
            return 0
        return await database[QUIZZES].count_documents({})

    @staticmethod
    async def create(data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a new quiz"""
        database = get_database()
        if database is None:
            raise Exception("Database not connected")

        quiz_data = {**data}
        quiz_data["createdAt"] = datetime.now()
        quiz_data["updatedAt"] = datetime.now()

        result = await database[QUIZZES].insert_one(quiz_data)
        quiz_data["_id"] = result.inserted_id
        quiz = serialize_document(quiz_data)

        print(f"✅ Quiz created: {quiz['id']} ({quiz.get('title')})")
        await change_feed.publish(QUIZZES, "insert", quiz["id"])
        return quiz

    @staticmethod
    async def update(quiz_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update quiz; returns the stored quiz or None when it does not exist"""
        database = get_database()
        if database is None:
            return None

        update_data = {**update_data, "updatedAt": datetime.now()}
        try:
            result = await database[QUIZZES].update_one(
                {"_id": ObjectId(quiz_id)},
                {"$set": update_data}
            )
        except (InvalidId, TypeError):
            return None

        if not result.matched_count:
            return None

        await change_feed.publish(QUIZZES, "update", quiz_id)
        return await QuizModel.find_by_id(quiz_id)

    @staticmethod
    async def delete(quiz_id: str) -> bool:
        """Delete quiz"""
        database = get_database()
        if database is None:
            return False

        try:
            result = await database[QUIZZES].delete_one({"_id": ObjectId(quiz_id)})
        except (InvalidId, TypeError):
            return False

        if result.deleted_count > 0:
            await change_feed.publish(QUIZZES, "delete", quiz_id)
            return True
        return False
