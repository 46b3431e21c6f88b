from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from ..models.leaderboard import LeaderboardResponse, QuizStats
from ..middleware.auth import require_admin
from ..services.quiz_service import QuizService
from ..services.leaderboard_service import ALL_QUIZZES

router = APIRouter(prefix="/api", tags=["leaderboard"])
quiz_service = QuizService()


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    quiz_id: str = Query(ALL_QUIZZES, alias="quizId"),
    participant_name: Optional[str] = Query(None, alias="participantName"),
):
    """
    Ranked leaderboard (public).
    participantName marks that participant's best-ranked row as "you".
    """
    try:
        return await quiz_service.get_leaderboard(quiz_id, participant_name)
    except Exception as e:
        print(f"Error building leaderboard: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load leaderboard"
        )


@router.get("/leaderboard/export")
async def export_leaderboard(quiz_id: str = Query(ALL_QUIZZES, alias="quizId")):
    """Download the leaderboard as CSV; 204 when there is nothing to export"""
    try:
        filename, content = await quiz_service.export_leaderboard(quiz_id)
    except Exception as e:
        print(f"Error exporting leaderboard: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to export leaderboard"
        )

    if content is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/stats", response_model=QuizStats)
async def get_stats(user: dict = Depends(require_admin)):
    """Dashboard counters (admin only)"""
    try:
        return await quiz_service.get_stats()
    except Exception as e:
        print(f"Error computing stats: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute stats"
        )
