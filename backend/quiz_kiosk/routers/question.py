from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from ..models.question import QuestionCreate, QuestionModel
from ..models.quiz import QuizModel
from ..middleware.auth import require_admin


router = APIRouter(prefix="/api/questions", tags=["questions"])


@router.get("/")
async def get_questions(
    quiz_id: Optional[str] = Query(None, alias="quizId"),
    user: dict = Depends(require_admin),
) -> List[dict]:
    """Get questions, optionally for one quiz (admin only; includes correct answers)"""
    try:
        if quiz_id:
            return await QuestionModel.find_by_quiz(quiz_id)
        return await QuestionModel.find_all()
    except Exception as e:
        print(f"Error retrieving questions: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to retrieve questions: {str(e)}"
        )


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_question(question_data: QuestionCreate, user: dict = Depends(require_admin)):
    """Create a new question for an existing quiz (admin only)"""
    try:
        quiz = await QuizModel.find_by_id(question_data.quizId)
        if not quiz:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")

        return await QuestionModel.create(question_data.model_dump())
    except HTTPException:
        raise
    except Exception as e:
        import traceback
        print(f"❌ Error creating question: {e}")
        traceback.print_exc()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create question: {str(e)}"
        )


@router.get("/{question_id}")
async def get_question_by_id(question_id: str, user: dict = Depends(require_admin)):
    """Get a specific question by ID (admin only)"""
    question = await QuestionModel.find_by_id(question_id)
    if not question:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
    return question


@router.put("/{question_id}")
async def update_question(
    question_id: str,
    question_data: QuestionCreate,
    user: dict = Depends(require_admin)
):
    """Update a question (admin only)"""
    try:
        quiz = await QuizModel.find_by_id(question_data.quizId)
        if not quiz:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")

        updated_question = await QuestionModel.update(question_id, question_data.model_dump())
        if not updated_question:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
        return updated_question
    except HTTPException:
        raise
    except Exception as e:
        print(f"Error updating question: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update question: {str(e)}"
        )


@router.delete("/{question_id}")
async def delete_question(question_id: str, user: dict = Depends(require_admin)):
    """Delete a question (admin only)"""
    try:
        success = await QuestionModel.delete(question_id)
        if not success:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Question not found")
        return {"success": True, "message": "Question deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        print(f"Error deleting question: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete question: {str(e)}"
        )
