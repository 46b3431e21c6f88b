from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    id: str
    participantName: str
    quizTitle: str
    score: int
    totalQuestions: int
    accuracy: int  # whole percent
    timeUsed: int  # in seconds
    completedAt: Optional[datetime] = None
    rank: int
    isCurrentUser: bool = False


class LeaderboardResponse(BaseModel):
    quizId: str
    entries: List[LeaderboardEntry]
    currentUserEntry: Optional[LeaderboardEntry] = None


class QuizStats(BaseModel):
    totalQuizzes: int
    totalQuestions: int
    totalParticipants: int
    avgScore: int
