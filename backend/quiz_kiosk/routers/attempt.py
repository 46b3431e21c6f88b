from typing import Optional
from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel
from ..services.quiz_service import QuizService, QuizNotFoundError
from ..services.attempt_service import attempt_manager, AttemptNotFoundError, AttemptStateError

router = APIRouter(prefix="/api/attempts", tags=["attempts"])
quiz_service = QuizService()


class StartAttemptRequest(BaseModel):
    quizId: str
    participantId: Optional[str] = None
    participantName: Optional[str] = None


class SelectAnswerRequest(BaseModel):
    questionId: str
    selectedOptionId: str


def _attempt_error(e: Exception) -> HTTPException:
    """Map attempt/service errors onto HTTP errors"""
    if isinstance(e, (AttemptNotFoundError, QuizNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, AttemptStateError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    print(f"❌ Attempt error: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error"
    )


@router.post("/", status_code=status.HTTP_201_CREATED)
async def start_attempt(request_data: StartAttemptRequest):
    """Start a timed attempt; the countdown runs on the server"""
    try:
        session = await quiz_service.start_attempt(
            request_data.quizId,
            participant_id=request_data.participantId,
            participant_name=request_data.participantName,
        )
        return session.to_public_dict()
    except Exception as e:
        raise _attempt_error(e)


@router.get("/{attempt_id}")
async def get_attempt(attempt_id: str):
    try:
        return attempt_manager.get(attempt_id).to_public_dict()
    except Exception as e:
        raise _attempt_error(e)


@router.post("/{attempt_id}/answers")
async def select_answer(attempt_id: str, request_data: SelectAnswerRequest):
    """Record (or replace) the answer to one question"""
    try:
        attempt_manager.select_answer(attempt_id, request_data.questionId, request_data.selectedOptionId)
        return attempt_manager.get(attempt_id).to_public_dict()
    except Exception as e:
        raise _attempt_error(e)


@router.post("/{attempt_id}/next")
async def next_question(attempt_id: str):
    try:
        index = attempt_manager.navigate(attempt_id, "next")
        return {"currentQuestionIndex": index}
    except Exception as e:
        raise _attempt_error(e)


@router.post("/{attempt_id}/previous")
async def previous_question(attempt_id: str):
    try:
        index = attempt_manager.navigate(attempt_id, "previous")
        return {"currentQuestionIndex": index}
    except Exception as e:
        raise _attempt_error(e)


@router.post("/{attempt_id}/submit")
async def submit_attempt(attempt_id: str):
    """Finish the attempt and post the result to the leaderboard"""
    try:
        return await attempt_manager.submit(attempt_id)
    except Exception as e:
        raise _attempt_error(e)


@router.delete("/{attempt_id}")
async def cancel_attempt(attempt_id: str):
    """Leave the attempt screen: stop the countdown and forget the attempt"""
    try:
        await attempt_manager.cancel(attempt_id)
        return {"success": True, "message": "Attempt cancelled"}
    except Exception as e:
        raise _attempt_error(e)
