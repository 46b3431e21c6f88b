from typing import Dict, Optional, Any, List
from datetime import datetime
import uuid
from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, Field
from ..database.connection import get_database, serialize_document, QUESTIONS
from ..services.change_feed import change_feed


class QuestionOption(BaseModel):
    id: Optional[str] = None  # generated when the question is stored
    text: str = Field(..., min_length=1)
    isCorrect: bool = False


class QuestionCreate(BaseModel):
    quizId: str
    text: str = Field(..., min_length=1)
    imageUrl: Optional[str] = None
    options: List[QuestionOption] = Field(..., min_length=2, max_length=4)


class Question(QuestionCreate):
    id: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


def assign_option_ids(options: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Give every option a stable id; existing ids are kept."""
    return [
        {**option, "id": option.get("id") or uuid.uuid4().hex[:12]}
        for option in options
    ]


class QuestionModel:
    @staticmethod
    async def find_by_id(question_id: str) -> Optional[Dict[str, Any]]:
        """Find question by ID"""
        database = get_database()
        if database is None:
            return None
        try:
            question = await database[QUESTIONS].find_one({"_id": ObjectId(question_id)})
        except (InvalidId, TypeError):
            return None
        return serialize_document(question)

    @staticmethod
    async def find_all() -> List[Dict[str, Any]]:
        """Find all questions"""
        database = get_database()
        if database is None:
            return []

        questions = []
        async for question in database[QUESTIONS].find():
            questions.append(serialize_document(question))
        return questions

    @staticmethod
    async def find_by_quiz(quiz_id: str) -> List[Dict[str, Any]]:
        """Find the questions of one quiz in creation order"""
        database = get_database()
        if database is None:
            return []

        questions = []
        async for question in database[QUESTIONS].find({"quizId": quiz_id}).sort("createdAt", 1):
            questions.append(serialize_document(question))
        return questions

    @staticmethod
    async def count_by_quiz() -> Dict[str, int]:
        """{quizId: number of questions}"""
        database = get_database()
        if database is None:
            return {}

        counts = {}
        pipeline = [{"$group": {"_id": "$quizId", "count": {"$sum": 1}}}]
        async for row in database[QUESTIONS].aggregate(pipeline):
            counts[row["_id"]] = row["count"]
        return counts

    @staticmethod
    async def create(data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a new question"""
        database = get_database()
        if database is None:
            raise Exception("Database not connected")

        question_data = {**data}
        question_data["options"] = assign_option_ids(question_data.get("options", []))
        question_data["createdAt"] = datetime.now()
        question_data["updatedAt"] = datetime.now()

        result = await database[QUESTIONS].insert_one(question_data)
        question_data["_id"] = result.inserted_id
        question = serialize_document(question_data)

        print(f"📝 Question inserted for quiz {question.get('quizId')}: {question['id']}")
        await change_feed.publish(QUESTIONS, "insert", question["id"])
        return question

    @staticmethod
    async def update(question_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update question"""
        database = get_database()
        if database is None:
            return None

        update_data = {**update_data, "updatedAt": datetime.now()}
        if "options" in update_data:
            update_data["options"] = assign_option_ids(update_data["options"])

        try:
            result = await database[QUESTIONS].update_one(
                {"_id": ObjectId(question_id)},
                {"$set": update_data}
            )
        except (InvalidId, TypeError):
            return None

        if not result.matched_count:
            return None

        await change_feed.publish(QUESTIONS, "update", question_id)
        return await QuestionModel.find_by_id(question_id)

    @staticmethod
    async def delete(question_id: str) -> bool:
        """Delete question"""
        database = get_database()
        if database is None:
            return False

        try:
            result = await database[QUESTIONS].delete_one({"_id": ObjectId(question_id)})
        except (InvalidId, TypeError):
            return False

        if result.deleted_count > 0:
            await change_feed.publish(QUESTIONS, "delete", question_id)
            return True
        return False

    @staticmethod
    async def delete_by_quiz(quiz_id: str) -> int:
        """Delete every question of a quiz; returns how many were removed"""
        database = get_database()
        if database is None:
            return 0

        result = await database[QUESTIONS].delete_many({"quizId": quiz_id})
        if result.deleted_count:
            await change_feed.publish(QUESTIONS, "delete", None)
        return result.deleted_count
