from typing import Dict, List, Optional, Tuple
from ..models.quiz import QuizModel
from ..models.question import QuestionModel
from ..models.participant import ParticipantModel, ANONYMOUS_NAME
from ..models.quiz_attempt import QuizAttemptModel
from ..models.leaderboard import LeaderboardResponse, QuizStats
from .attempt_service import attempt_manager, QuizAttemptSession
from .leaderboard_service import (
    ALL_QUIZZES,
    compute_leaderboard,
    compute_stats,
    export_csv,
    export_filename,
    find_current_user_entry,
    highlight_current_user,
)


class QuizNotFoundError(LookupError):
    pass


def get_difficulty_level(duration_minutes: int, question_count: int) -> str:
    """Easy / Medium / Hard from the time available per question."""
    questions = question_count or 1
    time_per_question = (duration_minutes * 60) / questions

    if time_per_question > 120 or questions <= 5:
        return "Easy"
    if time_per_question > 60 or questions <= 10:
        return "Medium"
    return "Hard"


def served_question_count(quiz: Dict, available: int) -> int:
    cap = quiz.get("questionCount")
    return min(cap, available) if cap else available


class QuizService:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(QuizService, cls).__new__(cls)
        return cls._instance

    # =========================================================
    # QUIZ CATALOGUE
    # =========================================================

    async def list_quizzes(self, active_only: bool = False) -> List[Dict]:
        """Quizzes with the number of questions served and a difficulty label"""
        quizzes = await QuizModel.find_all(active_only=active_only)
        counts = await QuestionModel.count_by_quiz()

        listed = []
        for quiz in quizzes:
            question_count = served_question_count(quiz, counts.get(quiz["id"], 0))
            listed.append({
                **quiz,
                "questionCount": question_count,
                "difficulty": get_difficulty_level(quiz.get("duration", 1), question_count),
            })
        return listed

    async def get_quiz(self, quiz_id: str) -> Dict:
        quiz = await QuizModel.find_by_id(quiz_id)
        if not quiz:
            raise QuizNotFoundError("Quiz not found")
        return quiz

    async def delete_quiz_and_leaderboard(self, quiz_id: str) -> Dict:
        """Remove a quiz together with its questions and leaderboard entries"""
        await self.get_quiz(quiz_id)

        deleted_attempts = await QuizAttemptModel.delete_by_quiz(quiz_id)
        deleted_questions = await QuestionModel.delete_by_quiz(quiz_id)
        await QuizModel.delete(quiz_id)

        print(f"🗑️ Quiz {quiz_id} deleted with {deleted_questions} questions and {deleted_attempts} leaderboard entries")
        return {
            "success": True,
            "deletedQuestions": deleted_questions,
            "deletedCount": deleted_attempts,
        }

    async def clear_leaderboard(self, quiz_id: str) -> int:
        await self.get_quiz(quiz_id)
        return await QuizAttemptModel.delete_by_quiz(quiz_id)

    # =========================================================
    # ATTEMPTS
    # =========================================================

    async def start_attempt(
        self,
        quiz_id: str,
        participant_id: Optional[str] = None,
        participant_name: Optional[str] = None,
    ) -> QuizAttemptSession:
        quiz = await self.get_quiz(quiz_id)
        if not quiz.get("isActive", True):
            raise ValueError("This quiz is not active")

        questions = await QuestionModel.find_by_quiz(quiz_id)
        if not questions:
            raise ValueError("This quiz has no questions yet")
        questions = questions[:served_question_count(quiz, len(questions))]

        if participant_id and not participant_name:
            participant = await ParticipantModel.find_by_id(participant_id)
            if participant:
                participant_name = participant.get("name")

        return await attempt_manager.start_attempt(
            quiz,
            questions,
            participant_name=participant_name or ANONYMOUS_NAME,
            participant_id=participant_id,
        )

    # =========================================================
    # LEADERBOARD & STATS
    # =========================================================

    async def get_leaderboard(
        self,
        quiz_id: Optional[str] = ALL_QUIZZES,
        participant_name: Optional[str] = None,
    ) -> LeaderboardResponse:
        quiz_id = quiz_id or ALL_QUIZZES
        attempts = await QuizAttemptModel.find_all()
        quizzes = await QuizModel.find_all()

        entries = highlight_current_user(
            compute_leaderboard(attempts, quizzes, quiz_id),
            participant_name,
        )
        return LeaderboardResponse(
            quizId=quiz_id,
            entries=entries,
            currentUserEntry=find_current_user_entry(entries, participant_name),
        )

    async def export_leaderboard(self, quiz_id: Optional[str] = ALL_QUIZZES) -> Tuple[str, Optional[str]]:
        """(filename, csv text or None when there is nothing to export)"""
        leaderboard = await self.get_leaderboard(quiz_id)
        return export_filename(leaderboard.quizId), export_csv(leaderboard.entries)

    async def get_stats(self) -> QuizStats:
        quizzes = await QuizModel.find_all()
        questions = await QuestionModel.find_all()
        attempts = await QuizAttemptModel.find_all()
        return compute_stats(quizzes, questions, attempts)
