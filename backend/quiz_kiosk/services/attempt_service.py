"""
Attempt Service
Live quiz attempts and their per-second countdown

Lifecycle of one attempt:
  NOT_STARTED -> IN_PROGRESS -> COMPLETED
                            `-> CANCELLED  (torn down, nothing stored)

- The countdown starts at duration * 60 seconds and ticks once per second
- Submitting, or the countdown reaching zero, completes the attempt and
  stores it as a quiz session with whatever answers were recorded
- Each question keeps only the latest selected option
- Ticker task and registry entry are removed together on every exit path
"""
import asyncio
import traceback
import uuid
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..models.participant import ANONYMOUS_NAME
from ..models.quiz import DEFAULT_QUIZ_DURATION
from ..models.quiz_attempt import QuizAttemptCreate, QuizAttemptModel
from .change_feed import ChangeFeed
from .leaderboard_service import calculate_accuracy

TICK_SECONDS = 1.0
FINISHED_RETENTION = timedelta(hours=1)


class AttemptState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AttemptStateError(ValueError):
    """Operation not allowed in the attempt's current state."""


class AttemptNotFoundError(LookupError):
    pass


class QuizAttemptSession:
    """State of one participant's run through a quiz."""

    def __init__(
        self,
        quiz: Dict[str, Any],
        questions: List[Dict[str, Any]],
        participant_name: Optional[str] = None,
        participant_id: Optional[str] = None,
        attempt_id: Optional[str] = None,
    ):
        self.id = attempt_id or uuid.uuid4().hex
        self.quiz = quiz
        self.questions = list(questions)
        self.participant_name = participant_name or ANONYMOUS_NAME
        self.participant_id = participant_id
        self.state = AttemptState.NOT_STARTED
        self.current_question_index = 0
        # {questionId: {"questionId", "selectedOptionId", "isCorrect"}}, first-answer order
        self.answers: Dict[str, Dict[str, Any]] = {}
        self.duration_seconds = int(quiz.get("duration") or DEFAULT_QUIZ_DURATION) * 60
        self.time_remaining = self.duration_seconds
        self.started_at: Optional[datetime] = None
        self.finished_at: Optional[datetime] = None
        self.result: Optional[Dict[str, Any]] = None

    @property
    def is_finished(self) -> bool:
        return self.state in (AttemptState.COMPLETED, AttemptState.CANCELLED)

    def _require_in_progress(self, action: str):
        if self.state != AttemptState.IN_PROGRESS:
            raise AttemptStateError(f"Cannot {action}: attempt is {self.state.value}")

    def start(self):
        if self.state != AttemptState.NOT_STARTED:
            raise AttemptStateError(f"Cannot start: attempt is {self.state.value}")
        self.state = AttemptState.IN_PROGRESS
        self.started_at = datetime.now()

    def select_answer(self, question_id: str, option_id: str) -> Dict[str, Any]:
        self._require_in_progress("answer")

        question = next((q for q in self.questions if q.get("id") == question_id), None)
        if question is None:
            raise ValueError("Question is not part of this attempt")

        option = next((o for o in question.get("options", []) if o.get("id") == option_id), None)
        if option is None:
            raise ValueError("Option does not belong to this question")

        answer = {
            "questionId": question_id,
            "selectedOptionId": option_id,
            "isCorrect": bool(option.get("isCorrect")),
        }
        self.answers[question_id] = answer
        return answer

    def next_question(self) -> int:
        self._require_in_progress("navigate")
        if self.current_question_index < len(self.questions) - 1:
            self.current_question_index += 1
        return self.current_question_index

    def previous_question(self) -> int:
        self._require_in_progress("navigate")
        if self.current_question_index > 0:
            self.current_question_index -= 1
        return self.current_question_index

    def tick(self) -> bool:
        """Count down one second; True once the time is up."""
        self._require_in_progress("tick")
        self.time_remaining = max(self.time_remaining - 1, 0)
        return self.time_remaining == 0

    @property
    def score(self) -> int:
        return sum(1 for answer in self.answers.values() if answer["isCorrect"])

    def complete(self) -> QuizAttemptCreate:
        """Finish the attempt and build the record to store."""
        self._require_in_progress("submit")
        self.state = AttemptState.COMPLETED
        self.finished_at = datetime.now()

        return QuizAttemptCreate(
            quizId=self.quiz["id"],
            participantId=self.participant_id,
            participantName=self.participant_name,
            score=self.score,
            totalQuestions=len(self.questions),
            timeUsed=self.duration_seconds - self.time_remaining,
            answers=list(self.answers.values()),
        )

    def cancel(self):
        if self.is_finished:
            raise AttemptStateError(f"Cannot cancel: attempt is {self.state.value}")
        self.state = AttemptState.CANCELLED
        self.finished_at = datetime.now()

    def to_public_dict(self) -> Dict[str, Any]:
        """Attempt state for clients; correct options stay hidden."""
        return {
            "id": self.id,
            "quizId": self.quiz.get("id"),
            "quizTitle": self.quiz.get("title"),
            "participantName": self.participant_name,
            "state": self.state.value,
            "currentQuestionIndex": self.current_question_index,
            "totalQuestions": len(self.questions),
            "timeRemaining": self.time_remaining,
            "questions": [
                {
                    "id": question.get("id"),
                    "text": question.get("text"),
                    "imageUrl": question.get("imageUrl"),
                    "options": [
                        {"id": option.get("id"), "text": option.get("text")}
                        for option in question.get("options", [])
                    ],
                }
                for question in self.questions
            ],
            "answers": [
                {"questionId": a["questionId"], "selectedOptionId": a["selectedOptionId"]}
                for a in self.answers.values()
            ],
            "currentScore": self.score,
            "result": self.result,
        }


class AttemptManager:
    """
    Registry of live attempts with one countdown task per attempt.
    Same task handling as a scheduled job: create_task on start,
    cancel + await on stop.
    """

    def __init__(self, tick_seconds: float = TICK_SECONDS):
        self.tick_seconds = tick_seconds
        self.attempts: Dict[str, QuizAttemptSession] = {}
        self.tickers: Dict[str, asyncio.Task] = {}
        # One channel per attempt id: tick / completed / cancelled events
        self.events = ChangeFeed()

    # =========================================================
    # LIFECYCLE
    # =========================================================

    async def start_attempt(
        self,
        quiz: Dict[str, Any],
        questions: List[Dict[str, Any]],
        participant_name: Optional[str] = None,
        participant_id: Optional[str] = None,
    ) -> QuizAttemptSession:
        self._evict_finished()

        session = QuizAttemptSession(quiz, questions, participant_name, participant_id)
        session.start()
        self.attempts[session.id] = session
        self.tickers[session.id] = asyncio.create_task(self._run_countdown(session.id))

        print(f"▶️ Attempt {session.id} started: quiz={quiz.get('id')}, participant={session.participant_name}, {session.time_remaining}s")
        return session

    def get(self, attempt_id: str) -> QuizAttemptSession:
        session = self.attempts.get(attempt_id)
        if session is None:
            raise AttemptNotFoundError("Attempt not found")
        return session

    def select_answer(self, attempt_id: str, question_id: str, option_id: str) -> Dict[str, Any]:
        return self.get(attempt_id).select_answer(question_id, option_id)

    def navigate(self, attempt_id: str, direction: str) -> int:
        session = self.get(attempt_id)
        if direction == "next":
            return session.next_question()
        if direction == "previous":
            return session.previous_question()
        raise ValueError(f"Unknown direction: {direction}")

    async def submit(self, attempt_id: str) -> Dict[str, Any]:
        """Participant finished: store the attempt and return the result"""
        self.get(attempt_id)
        return await self._finish(attempt_id, forced=False)

    async def cancel(self, attempt_id: str) -> bool:
        """Tear down an attempt (participant left the quiz screen)"""
        session = self.get(attempt_id)
        await self._stop_ticker(attempt_id)

        if not session.is_finished:
            session.cancel()
            print(f"🛑 Attempt {attempt_id} cancelled")
            await self.events.publish(attempt_id, "cancelled", attempt_id)

        self.attempts.pop(attempt_id, None)
        return True

    async def shutdown(self):
        """Stop every countdown (application exit)"""
        for attempt_id in list(self.tickers):
            await self._stop_ticker(attempt_id)
        self.attempts.clear()
        print("🔌 Attempt manager stopped")

    def subscribe(self, attempt_id: str, callback: Callable) -> Callable[[], None]:
        self.get(attempt_id)
        return self.events.subscribe(attempt_id, callback)

    # =========================================================
    # INTERNALS
    # =========================================================

    async def _run_countdown(self, attempt_id: str):
        try:
            while True:
                await asyncio.sleep(self.tick_seconds)

                session = self.attempts.get(attempt_id)
                if session is None or session.state != AttemptState.IN_PROGRESS:
                    break

                expired = session.tick()
                await self.events.publish(attempt_id, "tick", attempt_id, timeRemaining=session.time_remaining)

                if expired:
                    print(f"⏰ Attempt {attempt_id}: time is up, submitting recorded answers")
                    await self._finish(attempt_id, forced=True)
                    break
        except asyncio.CancelledError:
            raise
        except Exception as e:
            print(f"❌ Attempt {attempt_id}: countdown error: {e}")
            traceback.print_exc()
            await self._abandon(attempt_id)
        finally:
            self.tickers.pop(attempt_id, None)

    async def _abandon(self, attempt_id: str):
        """Drop an attempt whose countdown broke; it can no longer expire."""
        session = self.attempts.pop(attempt_id, None)
        if session is None:
            return
        if not session.is_finished:
            session.cancel()
            await self.events.publish(attempt_id, "cancelled", attempt_id, reason="countdown error")
        print(f"🛑 Attempt {attempt_id} dropped after countdown error")

    async def _stop_ticker(self, attempt_id: str):
        task = self.tickers.pop(attempt_id, None)
        if task is None or task is asyncio.current_task():
            return
        if not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _finish(self, attempt_id: str, forced: bool) -> Dict[str, Any]:
        session = self.attempts[attempt_id]
        record = session.complete()
        await self._stop_ticker(attempt_id)

        result = {
            **record.model_dump(),
            "percentage": calculate_accuracy(record.score, record.totalQuestions),
            "forced": forced,
            "successMessage": session.quiz.get("customSuccessMessage"),
            "saved": False,
        }

        try:
            stored = await QuizAttemptModel.create(record)
            result.update(id=stored.get("id"), completedAt=stored.get("completedAt"), saved=True)
        except Exception as e:
            # Attempt stays completed; the client tells the participant it was not saved
            print(f"⚠️ Attempt {attempt_id}: could not save results: {e}")

        session.result = result
        await self.events.publish(attempt_id, "completed", attempt_id, result=result)
        return result

    def _evict_finished(self):
        cutoff = datetime.now() - FINISHED_RETENTION
        stale = [
            attempt_id for attempt_id, session in self.attempts.items()
            if session.is_finished and session.finished_at and session.finished_at < cutoff
        ]
        for attempt_id in stale:
            del self.attempts[attempt_id]


# Global instance
attempt_manager = AttemptManager()
