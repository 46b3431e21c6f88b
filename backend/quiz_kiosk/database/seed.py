"""Seed database with initial data

Run with: python -m quiz_kiosk.database.seed
"""
import asyncio
import os

from .connection import connect_to_mongo, close_mongo_connection, get_database, ADMINS, QUIZZES
from ..models.admin import AdminModel
from ..models.quiz import QuizModel
from ..models.question import QuestionModel


async def seed_admin():
    """Create the first administrator from ADMIN_EMAIL / ADMIN_PASSWORD"""
    database = get_database()
    if database is None:
        return

    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        print("⚠️ ADMIN_EMAIL / ADMIN_PASSWORD not set, skipping admin seed")
        return

    if await database[ADMINS].count_documents({"email": email}) > 0:
        print(f"Admin {email} already exists, skipping seed")
        return

    await AdminModel.create(email, password)
    print(f"Created admin: {email}")


async def seed_quiz():
    """Seed a sample quiz with a few questions"""
    database = get_database()
    if database is None:
        return

    if await database[QUIZZES].count_documents({}) > 0:
        print("Quizzes already exist, skipping seed")
        return

    quiz = await QuizModel.create({
        "title": "General Knowledge",
        "description": "A quick warm-up for the kiosk.",
        "duration": 2,
        "questionCount": None,
        "isActive": True,
        "customSuccessMessage": "Thanks for playing!",
    })

    questions = [
        {
            "text": "What is the capital of France?",
            "options": [
                {"text": "Berlin", "isCorrect": False},
                {"text": "Paris", "isCorrect": True},
                {"text": "Madrid", "isCorrect": False},
                {"text": "Rome", "isCorrect": False},
            ],
        },
        {
            "text": "How many minutes are in an hour?",
            "options": [
                {"text": "60", "isCorrect": True},
                {"text": "100", "isCorrect": False},
            ],
        },
        {
            "text": "Which planet is known as the Red Planet?",
            "options": [
                {"text": "Venus", "isCorrect": False},
                {"text": "Jupiter", "isCorrect": False},
                {"text": "Mars", "isCorrect": True},
            ],
        },
    ]

    for question_data in questions:
        await QuestionModel.create({**question_data, "quizId": quiz["id"], "imageUrl": None})
        print(f"Created question: {question_data['text']}")


async def main():
    await connect_to_mongo()
    try:
        await seed_admin()
        await seed_quiz()
        print("Database seeded successfully!")
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(main())
