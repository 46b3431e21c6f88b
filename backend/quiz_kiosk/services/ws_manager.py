"""
WebSocket Connection Manager Service
Pushes live leaderboard snapshots to kiosk screens

Each connection keeps its own view (quiz filter + highlighted participant).
While at least one screen is connected the hub is subscribed to the
quizzes and quiz_sessions change feed; every change re-reads both
collections once and sends each screen a freshly computed leaderboard.
"""
import asyncio
from datetime import datetime
from typing import Callable, Dict, List, Optional
from fastapi import WebSocket
from ..database.connection import QUIZZES, QUIZ_SESSIONS
from ..models.quiz import QuizModel
from ..models.quiz_attempt import QuizAttemptModel
from ..models.leaderboard import LeaderboardResponse
from .change_feed import change_feed, ChangeFeed
from .leaderboard_service import (
    ALL_QUIZZES,
    compute_leaderboard,
    find_current_user_entry,
    highlight_current_user,
)


def build_leaderboard_message(attempts: List[dict], quizzes: List[dict], view: dict) -> dict:
    entries = highlight_current_user(
        compute_leaderboard(attempts, quizzes, view["quizId"]),
        view.get("participantName"),
    )
    leaderboard = LeaderboardResponse(
        quizId=view["quizId"],
        entries=entries,
        currentUserEntry=find_current_user_entry(entries, view.get("participantName")),
    )
    return {
        "type": "leaderboard",
        **leaderboard.model_dump(mode="json"),
        "timestamp": datetime.now().isoformat(),
    }


class WebSocketManager:
    def __init__(self, feed: ChangeFeed = change_feed):
        self.feed = feed
        # {websocket: {"quizId": str, "participantName": Optional[str], "connectedAt": str}}
        self.leaderboard_connections: Dict[WebSocket, dict] = {}
        self._unsubscribers: List[Callable[[], None]] = []

    # =========================================================
    # LEADERBOARD SCREENS
    # =========================================================

    async def connect_leaderboard(
        self,
        websocket: WebSocket,
        quiz_id: Optional[str] = None,
        participant_name: Optional[str] = None,
    ):
        await websocket.accept()
        self.leaderboard_connections[websocket] = {
            "quizId": quiz_id or ALL_QUIZZES,
            "participantName": participant_name,
            "connectedAt": datetime.now().isoformat(),
        }
        self._ensure_subscribed()
        print(f"📺 Leaderboard screen connected ({len(self.leaderboard_connections)} total)")

        await self.send_snapshot(websocket)

    def disconnect_leaderboard(self, websocket: WebSocket):
        self.leaderboard_connections.pop(websocket, None)
        if not self.leaderboard_connections:
            self._unsubscribe_all()
        print(f"👋 Leaderboard screen disconnected ({len(self.leaderboard_connections)} left)")

    async def set_filter(self, websocket: WebSocket, quiz_id: Optional[str]):
        view = self.leaderboard_connections.get(websocket)
        if view is None:
            return
        view["quizId"] = quiz_id or ALL_QUIZZES
        await self.send_snapshot(websocket)

    async def send_snapshot(self, websocket: WebSocket, attempts: List[dict] = None, quizzes: List[dict] = None) -> bool:
        view = self.leaderboard_connections.get(websocket)
        if view is None:
            return False

        if attempts is None:
            attempts = await QuizAttemptModel.find_all()
        if quizzes is None:
            quizzes = await QuizModel.find_all()

        try:
            await websocket.send_json(build_leaderboard_message(attempts, quizzes, view))
            return True
        except Exception as e:
            print(f"⚠️ Failed to push leaderboard: {e}")
            return False

    async def broadcast_leaderboards(self) -> int:
        """Recompute and push to every connected screen; returns how many got it"""
        if not self.leaderboard_connections:
            return 0

        attempts = await QuizAttemptModel.find_all()
        quizzes = await QuizModel.find_all()

        screens = list(self.leaderboard_connections)
        results = await asyncio.gather(
            *(self.send_snapshot(ws, attempts, quizzes) for ws in screens)
        )

        for websocket, ok in zip(screens, results):
            if not ok:
                self.disconnect_leaderboard(websocket)
        return sum(1 for ok in results if ok)

    async def _on_change(self, collection: str, change: dict):
        print(f"🔄 {collection} changed ({change.get('type')}), refreshing leaderboards")
        await self.broadcast_leaderboards()

    # =========================================================
    # FEED SUBSCRIPTION
    # =========================================================

    def _ensure_subscribed(self):
        if self._unsubscribers:
            return
        self._unsubscribers = [
            self.feed.subscribe(QUIZ_SESSIONS, self._on_change),
            self.feed.subscribe(QUIZZES, self._on_change),
        ]

    def _unsubscribe_all(self):
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    async def close_all(self):
        """Close every screen and drop the feed subscription (application exit)"""
        for websocket in list(self.leaderboard_connections):
            try:
                await websocket.close()
            except Exception as e:
                print(f"⚠️ Error closing leaderboard socket: {e}")
        self.leaderboard_connections.clear()
        self._unsubscribe_all()

    def get_all_stats(self) -> dict:
        return {
            "leaderboardScreens": len(self.leaderboard_connections),
            "subscribed": bool(self._unsubscribers),
            "views": [
                {"quizId": view["quizId"], "connectedAt": view["connectedAt"]}
                for view in self.leaderboard_connections.values()
            ],
        }


# Global instance
ws_manager = WebSocketManager()
