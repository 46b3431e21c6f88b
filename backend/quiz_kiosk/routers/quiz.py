from typing import List
from fastapi import APIRouter, Depends, HTTPException, status, Query
from ..models.quiz import QuizCreate, QuizModel
from ..middleware.auth import require_admin
from ..services.quiz_service import QuizService, QuizNotFoundError

router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
quiz_service = QuizService()


@router.get("/")
async def get_quizzes(active_only: bool = Query(False, alias="activeOnly")) -> List[dict]:
    """List quizzes with their question count and difficulty (public)"""
    try:
        return await quiz_service.list_quizzes(active_only=active_only)
    except Exception as e:
        print(f"Error retrieving quizzes: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to retrieve quizzes: {str(e)}"
        )


@router.get("/{quiz_id}")
async def get_quiz(quiz_id: str):
    """Get a specific quiz (public)"""
    try:
        return await quiz_service.get_quiz(quiz_id)
    except QuizNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        print(f"Error retrieving quiz: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to retrieve quiz: {str(e)}"
        )


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_quiz(quiz_data: QuizCreate, user: dict = Depends(require_admin)):
    """Create a new quiz (admin only)"""
    try:
        print(f"📝 Creating quiz by admin: {user.get('email', 'unknown')}")
        return await QuizModel.create(quiz_data.model_dump())
    except Exception as e:
        print(f"❌ Error creating quiz: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create quiz: {str(e)}"
        )


@router.put("/{quiz_id}")
async def update_quiz(quiz_id: str, quiz_data: QuizCreate, user: dict = Depends(require_admin)):
    """Update a quiz (admin only)"""
    try:
        updated_quiz = await QuizModel.update(quiz_id, quiz_data.model_dump())
        if not updated_quiz:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
        return updated_quiz
    except HTTPException:
        raise
    except Exception as e:
        print(f"Error updating quiz: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update quiz: {str(e)}"
        )


@router.delete("/{quiz_id}")
async def delete_quiz(quiz_id: str, user: dict = Depends(require_admin)):
    """Delete a quiz with its questions and leaderboard (admin only)"""
    try:
        result = await quiz_service.delete_quiz_and_leaderboard(quiz_id)
        return {**result, "message": "Quiz and its leaderboard deleted successfully"}
    except QuizNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        print(f"Error deleting quiz: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete quiz: {str(e)}"
        )


@router.delete("/{quiz_id}/leaderboard")
async def clear_leaderboard(quiz_id: str, user: dict = Depends(require_admin)):
    """Remove every leaderboard entry of a quiz (admin only)"""
    try:
        deleted_count = await quiz_service.clear_leaderboard(quiz_id)
        return {
            "success": True,
            "deletedCount": deleted_count,
            "message": f"{deleted_count} entries removed."
        }
    except QuizNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        print(f"Error clearing leaderboard: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to clear leaderboard: {str(e)}"
        )
