"""
Leaderboard Service
Turns stored quiz attempts into a ranked leaderboard and its CSV export

Everything here is a pure function of its arguments: the same attempts,
quizzes and filter always give the same entries, so the socket hub can
recompute on every change notification.
"""
import csv
import io
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..models.leaderboard import LeaderboardEntry, QuizStats

ALL_QUIZZES = "all"
UNKNOWN_QUIZ_TITLE = "Unknown Quiz"
CSV_HEADER = ["Rank", "Name", "Quiz", "Score", "Accuracy", "Time", "Date"]


def _as_dict(record: Any) -> Dict[str, Any]:
    if isinstance(record, Mapping):
        return dict(record)
    return record.model_dump()


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def calculate_accuracy(score: int, total_questions: int) -> int:
    """Whole percent, halves rounded up; 0 when there were no questions."""
    if total_questions <= 0:
        return 0
    return (200 * score + total_questions) // (2 * total_questions)


def compute_leaderboard(
    attempts: Optional[Iterable[Any]],
    quizzes: Optional[Iterable[Any]],
    filter_quiz_id: Optional[str] = ALL_QUIZZES,
) -> List[LeaderboardEntry]:
    """
    Build the ranked leaderboard.

    Attempts are filtered by quiz (unless the filter is "all"), projected
    into entries with the quiz title and accuracy, sorted by score
    (highest first) then time used (fastest first) and numbered 1..N.
    Attempts tied on both keys keep their input order.
    """
    titles = {}
    for quiz in quizzes or []:
        quiz = _as_dict(quiz)
        titles[quiz.get("id")] = quiz.get("title")

    show_all = filter_quiz_id in (None, ALL_QUIZZES)

    projected = []
    for attempt in attempts or []:
        attempt = _as_dict(attempt)
        if not show_all and attempt.get("quizId") != filter_quiz_id:
            continue

        score = _as_int(attempt.get("score"))
        total_questions = _as_int(attempt.get("totalQuestions"))
        projected.append({
            "id": str(attempt.get("id")),
            "participantName": attempt.get("participantName") or "",
            "quizTitle": titles.get(attempt.get("quizId")) or UNKNOWN_QUIZ_TITLE,
            "score": score,
            "totalQuestions": total_questions,
            "accuracy": calculate_accuracy(score, total_questions),
            "timeUsed": _as_int(attempt.get("timeUsed")),
            "completedAt": parse_timestamp(attempt.get("completedAt")),
        })

    # sorted() is stable, exact ties keep input order
    ranked = sorted(projected, key=lambda row: (-row["score"], row["timeUsed"]))

    return [
        LeaderboardEntry(**row, rank=index + 1)
        for index, row in enumerate(ranked)
    ]


def find_current_user_entry(
    entries: List[LeaderboardEntry],
    participant_name: Optional[str],
) -> Optional[LeaderboardEntry]:
    """First entry (by rank) whose name matches exactly."""
    if not participant_name:
        return None
    return next(
        (entry for entry in entries if entry.participantName == participant_name),
        None,
    )


def highlight_current_user(
    entries: List[LeaderboardEntry],
    participant_name: Optional[str],
) -> List[LeaderboardEntry]:
    """Copy of the entries with the current participant's row flagged."""
    current = find_current_user_entry(entries, participant_name)
    return [
        entry.model_copy(update={"isCurrentUser": current is not None and entry.id == current.id})
        for entry in entries
    ]


def format_time(seconds: int) -> str:
    """125 -> '2:05'"""
    minutes, secs = divmod(max(int(seconds), 0), 60)
    return f"{minutes}:{secs:02}"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Completion time as a datetime, or None when it cannot be read.

    Accepts datetimes, ISO strings and {"seconds": ..., "nanoseconds": ...}
    timestamp objects; anything else is treated as unknown.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    if isinstance(value, Mapping) and isinstance(value.get("seconds"), (int, float)):
        try:
            return datetime.fromtimestamp(value["seconds"] + (value.get("nanoseconds") or 0) / 1e9)
        except (OverflowError, OSError, ValueError, TypeError):
            return None
    return None


def format_date(value: Any) -> str:
    """Calendar date in en-US form (M/D/YYYY); '' when unknown."""
    value = parse_timestamp(value)
    if value is None:
        return ""
    return f"{value.month}/{value.day}/{value.year}"


def export_csv(entries: List[LeaderboardEntry]) -> Optional[str]:
    """
    Render the entries, in the order given, as CSV text.

    Returns None when there is nothing to export so callers skip producing
    a file. Fields holding commas, quotes or newlines are quoted with
    doubled inner quotes (the csv module's minimal quoting).
    """
    if not entries:
        return None

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for entry in entries:
        writer.writerow([
            entry.rank,
            entry.participantName,
            entry.quizTitle,
            f"{entry.score}/{entry.totalQuestions}",
            f"{entry.accuracy}%",
            format_time(entry.timeUsed),
            format_date(entry.completedAt),
        ])
    return buffer.getvalue()


def export_filename(filter_quiz_id: Optional[str]) -> str:
    if filter_quiz_id in (None, ALL_QUIZZES):
        return "leaderboard-all-quizzes.csv"
    return f"leaderboard-{filter_quiz_id}.csv"


def compute_stats(
    quizzes: Iterable[Any],
    questions: Iterable[Any],
    attempts: Iterable[Any],
) -> QuizStats:
    """Admin dashboard counters."""
    attempts = [_as_dict(attempt) for attempt in attempts or []]

    percentages = []
    for attempt in attempts:
        total_questions = _as_int(attempt.get("totalQuestions"))
        score = _as_int(attempt.get("score"))
        percentages.append(100 * score / total_questions if total_questions > 0 else 0)

    avg_score = 0
    if percentages:
        avg_score = int(sum(percentages) / len(percentages) + 0.5)

    return QuizStats(
        totalQuizzes=len(list(quizzes or [])),
        totalQuestions=len(list(questions or [])),
        totalParticipants=len({attempt.get("participantName") for attempt in attempts}),
        avgScore=avg_score,
    )
