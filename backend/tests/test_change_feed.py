"""
Tests for the in-process change feed and the leaderboard socket hub.
"""
from unittest.mock import AsyncMock

import pytest

from conftest import make_attempt, make_quiz
from quiz_kiosk.database.connection import QUIZ_SESSIONS, QUIZZES
from quiz_kiosk.models.quiz import QuizModel
from quiz_kiosk.models.quiz_attempt import QuizAttemptModel
from quiz_kiosk.services.change_feed import ChangeFeed
from quiz_kiosk.services.ws_manager import WebSocketManager


class FakeWebSocket:
    """Records what the hub sends; optionally fails every send."""

    def __init__(self, fail=False):
        self.fail = fail
        self.accepted = False
        self.closed = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket gone")
        self.sent.append(data)

    async def close(self):
        self.closed = True


class TestChangeFeed:
    async def test_publish_reaches_subscribers(self):
        feed = ChangeFeed()
        received = []

        async def on_change(collection, change):
            received.append((collection, change))

        feed.subscribe(QUIZ_SESSIONS, on_change)
        feed.subscribe(QUIZ_SESSIONS, lambda collection, change: received.append(("sync", change)))

        delivered = await feed.publish(QUIZ_SESSIONS, "insert", "a1")

        assert delivered == 2
        assert received[0] == (QUIZ_SESSIONS, {"type": "insert", "id": "a1"})
        assert received[1][0] == "sync"

    async def test_other_collections_not_notified(self):
        feed = ChangeFeed()
        received = []
        feed.subscribe(QUIZZES, lambda collection, change: received.append(change))

        assert await feed.publish(QUIZ_SESSIONS, "insert", "a1") == 0
        assert received == []

    async def test_unsubscribe_stops_delivery(self):
        feed = ChangeFeed()
        received = []
        unsubscribe = feed.subscribe(QUIZZES, lambda collection, change: received.append(change))

        unsubscribe()
        await feed.publish(QUIZZES, "update", "quiz1")

        assert received == []
        assert feed.subscriber_count() == 0
        unsubscribe()  # second call is harmless

    async def test_failing_subscriber_isolated(self):
        feed = ChangeFeed()
        received = []

        def broken(collection, change):
            raise RuntimeError("boom")

        feed.subscribe(QUIZZES, broken)
        feed.subscribe(QUIZZES, lambda collection, change: received.append(change))

        delivered = await feed.publish(QUIZZES, "delete", "quiz1")

        assert delivered == 1
        assert received == [{"type": "delete", "id": "quiz1"}]

    async def test_extra_details_in_change(self):
        feed = ChangeFeed()
        received = []
        feed.subscribe("attempt1", lambda channel, change: received.append(change))

        await feed.publish("attempt1", "tick", "attempt1", timeRemaining=42)

        assert received == [{"type": "tick", "id": "attempt1", "timeRemaining": 42}]


@pytest.fixture
def leaderboard_data(monkeypatch):
    attempts = [
        make_attempt("a1", score=3, time_used=20, name="Ada"),
        make_attempt("a2", score=5, time_used=30, name="Bob", quiz_id="quiz2"),
    ]
    monkeypatch.setattr(QuizAttemptModel, "find_all", AsyncMock(side_effect=lambda: list(attempts)))
    monkeypatch.setattr(QuizModel, "find_all", AsyncMock(return_value=[make_quiz("quiz1"), make_quiz("quiz2", "Rivers")]))
    return attempts


class TestWebSocketManager:
    async def test_connect_sends_snapshot(self, leaderboard_data):
        hub = WebSocketManager(feed=ChangeFeed())
        screen = FakeWebSocket()

        await hub.connect_leaderboard(screen, quiz_id="quiz1", participant_name="Ada")

        assert screen.accepted
        message = screen.sent[0]
        assert message["type"] == "leaderboard"
        assert message["quizId"] == "quiz1"
        assert [entry["id"] for entry in message["entries"]] == ["a1"]
        assert message["currentUserEntry"]["participantName"] == "Ada"
        assert message["entries"][0]["isCurrentUser"] is True

    async def test_change_pushes_each_view(self, leaderboard_data):
        feed = ChangeFeed()
        hub = WebSocketManager(feed=feed)
        everything = FakeWebSocket()
        rivers = FakeWebSocket()
        await hub.connect_leaderboard(everything)
        await hub.connect_leaderboard(rivers, quiz_id="quiz2")

        leaderboard_data.append(make_attempt("a3", score=9, time_used=10, name="Cy", quiz_id="quiz2"))
        await feed.publish(QUIZ_SESSIONS, "insert", "a3")

        assert [e["id"] for e in everything.sent[-1]["entries"]] == ["a3", "a2", "a1"]
        assert [e["id"] for e in rivers.sent[-1]["entries"]] == ["a3", "a2"]

    async def test_filter_change_sends_snapshot(self, leaderboard_data):
        hub = WebSocketManager(feed=ChangeFeed())
        screen = FakeWebSocket()
        await hub.connect_leaderboard(screen)

        await hub.set_filter(screen, "quiz2")

        assert screen.sent[-1]["quizId"] == "quiz2"
        assert [e["id"] for e in screen.sent[-1]["entries"]] == ["a2"]

    async def test_last_disconnect_unsubscribes(self, leaderboard_data):
        feed = ChangeFeed()
        hub = WebSocketManager(feed=feed)
        first, second = FakeWebSocket(), FakeWebSocket()
        await hub.connect_leaderboard(first)
        await hub.connect_leaderboard(second)
        assert feed.subscriber_count(QUIZ_SESSIONS) == 1

        hub.disconnect_leaderboard(first)
        assert feed.subscriber_count(QUIZ_SESSIONS) == 1

        hub.disconnect_leaderboard(second)
        assert feed.subscriber_count() == 0

    async def test_failed_screen_dropped(self, leaderboard_data):
        feed = ChangeFeed()
        hub = WebSocketManager(feed=feed)
        good, broken = FakeWebSocket(), FakeWebSocket()
        await hub.connect_leaderboard(good)
        await hub.connect_leaderboard(broken)
        broken.fail = True

        delivered = await hub.broadcast_leaderboards()

        assert delivered == 1
        assert broken not in hub.leaderboard_connections
        assert good in hub.leaderboard_connections

    async def test_close_all(self, leaderboard_data):
        feed = ChangeFeed()
        hub = WebSocketManager(feed=feed)
        screen = FakeWebSocket()
        await hub.connect_leaderboard(screen)

        await hub.close_all()

        assert screen.closed
        assert hub.leaderboard_connections == {}
        assert feed.subscriber_count() == 0
