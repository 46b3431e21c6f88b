"""
Tests for leaderboard ranking, highlighting and dashboard stats.
"""
import random
from datetime import datetime

from conftest import make_attempt, make_quiz
from quiz_kiosk.models.quiz_attempt import QuizAttempt
from quiz_kiosk.services.leaderboard_service import (
    ALL_QUIZZES,
    UNKNOWN_QUIZ_TITLE,
    calculate_accuracy,
    compute_leaderboard,
    compute_stats,
    export_csv,
    find_current_user_entry,
    highlight_current_user,
    parse_timestamp,
)


def random_attempts(count, seed):
    rng = random.Random(seed)
    return [
        make_attempt(
            f"a{i}",
            score=rng.randint(0, 5),
            time_used=rng.randint(10, 40),
            quiz_id=rng.choice(["quiz1", "quiz2"]),
            total=5,
        )
        for i in range(count)
    ]


class TestAccuracy:
    def test_eight_out_of_ten(self):
        assert calculate_accuracy(8, 10) == 80

    def test_halves_round_up(self):
        # 1/8 = 12.5%, 5/8 = 62.5%
        assert calculate_accuracy(1, 8) == 13
        assert calculate_accuracy(5, 8) == 63

    def test_rounds_to_nearest(self):
        assert calculate_accuracy(1, 3) == 33
        assert calculate_accuracy(2, 3) == 67

    def test_no_questions_is_zero(self):
        assert calculate_accuracy(0, 0) == 0
        assert calculate_accuracy(3, 0) == 0


class TestComputeLeaderboard:
    def test_rank_order_example(self):
        """Higher score first, then faster time"""
        attempts = [
            make_attempt("slow9", score=9, time_used=120),
            make_attempt("fast9", score=9, time_used=90),
            make_attempt("top10", score=10, time_used=300),
        ]
        entries = compute_leaderboard(attempts, [make_quiz()])

        ranks = {entry.id: entry.rank for entry in entries}
        assert ranks == {"top10": 1, "fast9": 2, "slow9": 3}

    def test_projection_fields(self):
        entries = compute_leaderboard([make_attempt("a1", score=8, time_used=61, name="Ada")], [make_quiz()])

        entry = entries[0]
        assert entry.participantName == "Ada"
        assert entry.quizTitle == "Capitals"
        assert entry.score == 8
        assert entry.totalQuestions == 10
        assert entry.accuracy == 80
        assert entry.timeUsed == 61
        assert entry.isCurrentUser is False

    def test_unknown_quiz_title(self):
        entries = compute_leaderboard([make_attempt("a1", 5, 30, quiz_id="gone")], [make_quiz()])
        assert entries[0].quizTitle == UNKNOWN_QUIZ_TITLE

    def test_filter_without_matches_is_empty(self):
        attempts = [make_attempt("a1", 5, 30)]
        assert compute_leaderboard(attempts, [make_quiz()], "other-quiz") == []

    def test_absent_inputs(self):
        assert compute_leaderboard(None, None) == []
        assert compute_leaderboard([], []) == []

    def test_filter_keeps_only_matching_quiz(self):
        attempts = random_attempts(30, seed=1)
        entries = compute_leaderboard(attempts, [make_quiz("quiz1"), make_quiz("quiz2", "Rivers")], "quiz2")

        expected = {a["id"] for a in attempts if a["quizId"] == "quiz2"}
        assert {entry.id for entry in entries} == expected
        assert all(entry.quizTitle == "Rivers" for entry in entries)

    def test_all_keeps_every_attempt(self):
        attempts = random_attempts(25, seed=2)
        assert len(compute_leaderboard(attempts, [], ALL_QUIZZES)) == 25
        assert len(compute_leaderboard(attempts, [], None)) == 25

    def test_ranks_are_a_permutation(self):
        for seed in range(5):
            entries = compute_leaderboard(random_attempts(40, seed), [])
            assert [entry.rank for entry in entries] == list(range(1, 41))

    def test_ordering_invariant(self):
        for seed in range(5):
            entries = compute_leaderboard(random_attempts(40, seed), [])
            for a, b in zip(entries, entries[1:]):
                assert a.score > b.score or (a.score == b.score and a.timeUsed <= b.timeUsed)

    def test_exact_ties_keep_input_order(self):
        attempts = [make_attempt(f"t{i}", score=3, time_used=50) for i in range(5)]
        entries = compute_leaderboard(attempts, [])
        assert [entry.id for entry in entries] == ["t0", "t1", "t2", "t3", "t4"]

    def test_deterministic(self):
        attempts = random_attempts(20, seed=7)
        quizzes = [make_quiz("quiz1"), make_quiz("quiz2", "Rivers")]
        assert compute_leaderboard(attempts, quizzes, "quiz1") == compute_leaderboard(attempts, quizzes, "quiz1")

    def test_inputs_not_mutated(self):
        attempts = [make_attempt("a1", 5, 30), make_attempt("a2", 7, 40)]
        snapshot = [dict(a) for a in attempts]
        compute_leaderboard(attempts, [make_quiz()])
        assert attempts == snapshot

    def test_accepts_models(self):
        attempt = QuizAttempt(**make_attempt("m1", 4, 20, total=5))
        entries = compute_leaderboard([attempt], [make_quiz()])
        assert entries[0].id == "m1"
        assert entries[0].accuracy == 80


class TestCurrentUser:
    def test_first_match_by_rank(self):
        attempts = [
            make_attempt("low", score=2, time_used=10, name="Bob"),
            make_attempt("high", score=9, time_used=10, name="Bob"),
            make_attempt("other", score=5, time_used=10, name="Eve"),
        ]
        entries = compute_leaderboard(attempts, [])

        assert find_current_user_entry(entries, "Bob").id == "high"
        assert find_current_user_entry(entries, "Nobody") is None
        assert find_current_user_entry(entries, None) is None

    def test_highlight_flags_one_row(self):
        attempts = [
            make_attempt("a1", score=2, time_used=10, name="Bob"),
            make_attempt("a2", score=9, time_used=10, name="Bob"),
        ]
        entries = compute_leaderboard(attempts, [])
        highlighted = highlight_current_user(entries, "Bob")

        assert [entry.isCurrentUser for entry in highlighted] == [True, False]
        assert [entry.id for entry in highlighted] == [entry.id for entry in entries]
        # original entries untouched
        assert not any(entry.isCurrentUser for entry in entries)

    def test_exact_name_match_only(self):
        entries = compute_leaderboard([make_attempt("a1", 2, 10, name="Bob")], [])
        assert not any(entry.isCurrentUser for entry in highlight_current_user(entries, "bob"))


class TestUnreadableFields:
    """Odd stored values never break the leaderboard."""

    def test_unparseable_completed_at(self):
        attempts = [
            make_attempt("a1", 5, 30, completed_at="March 7, 2024"),
            make_attempt("a2", 6, 30, completed_at={"unexpected": True}),
        ]
        entries = compute_leaderboard(attempts, [make_quiz()])

        assert [entry.id for entry in entries] == ["a2", "a1"]
        assert all(entry.completedAt is None for entry in entries)
        assert export_csv(entries).split("\n")[1].endswith(",")

    def test_timestamp_object_and_iso_string(self):
        attempts = [
            make_attempt("a1", 5, 30, completed_at={"seconds": 1709821800, "nanoseconds": 0}),
            make_attempt("a2", 4, 30, completed_at="2024-03-07T14:30:00"),
        ]
        entries = compute_leaderboard(attempts, [make_quiz()])

        assert entries[0].completedAt == datetime.fromtimestamp(1709821800)
        assert entries[1].completedAt == datetime(2024, 3, 7, 14, 30)

    def test_non_numeric_counts(self):
        attempt = {**make_attempt("a1", 0, 0), "score": "lots", "totalQuestions": None, "timeUsed": "?"}
        entry = compute_leaderboard([attempt], [make_quiz()])[0]

        assert (entry.score, entry.totalQuestions, entry.timeUsed, entry.accuracy) == (0, 0, 0, 0)

    def test_parse_timestamp(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp(12345) is None
        assert parse_timestamp("not a date") is None


class TestStats:
    def test_counts_and_average(self):
        attempts = [
            make_attempt("a1", score=10, time_used=10, name="Ada", total=10),
            make_attempt("a2", score=5, time_used=10, name="Ada", total=10),
            make_attempt("a3", score=1, time_used=10, name="Bob", total=3),
        ]
        stats = compute_stats([make_quiz()], [{"id": "q1"}, {"id": "q2"}], attempts)

        assert stats.totalQuizzes == 1
        assert stats.totalQuestions == 2
        assert stats.totalParticipants == 2
        # (100 + 50 + 33.33) / 3 = 61.1
        assert stats.avgScore == 61

    def test_empty(self):
        stats = compute_stats([], [], [])
        assert stats.avgScore == 0
        assert stats.totalParticipants == 0
