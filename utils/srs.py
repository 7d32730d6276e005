"""
Spaced repetition scheduling on top of FSRS (fsrs-rs-python).

A card's memory state is the stability/difficulty pair stored on its most
recent review; a card that was never reviewed has no memory state and
counts elapsed time from its creation.

Ratings: 'again' (1), 'hard' (2), 'good' (3), 'easy' (4)
"""

from datetime import datetime, timedelta

from fsrs_rs_python import FSRS, DEFAULT_PARAMETERS, MemoryState

from utils.errors import InvalidRatingError
from utils.utils import utcnow, SECONDS_PER_DAY

# Rating constants
AGAIN = 1
HARD = 2
GOOD = 3
EASY = 4

RATINGS = (AGAIN, HARD, GOOD, EASY)
RATING_LABELS = {AGAIN: 'again', HARD: 'hard', GOOD: 'good', EASY: 'easy'}

DESIRED_RETENTION = 0.9

_fsrs = FSRS(parameters=list(DEFAULT_PARAMETERS))


def predict(
    memory: MemoryState | None,
    elapsed_days: int,
    desired_retention: float = DESIRED_RETENTION,
) -> dict[int, dict[str, float]]:
    """
    The four candidate outcomes of reviewing a card now.

    Returns {rating: {'stability', 'difficulty', 'interval'}} where interval
    is the unrounded number of days until the next review.
    """
    next_states = _fsrs.next_states(memory, desired_retention, elapsed_days)
    arms = {
        AGAIN: next_states.again,
        HARD: next_states.hard,
        GOOD: next_states.good,
        EASY: next_states.easy,
    }
    return {
        rating: {
            'stability': arm.memory.stability,
            'difficulty': arm.memory.difficulty,
            'interval': float(arm.interval),
        }
        for rating, arm in arms.items()
    }


def memory_from_review(review: dict | None) -> MemoryState | None:
    if review is None:
        return None
    return MemoryState(stability=review['stability'], difficulty=review['difficulty'])


def elapsed_days(card: dict, last_review: dict | None, now: datetime) -> int:
    """Whole days since the last review, or since creation for a new card."""
    anchor = last_review['review_time'] if last_review else card['created_at']
    days = int((now - anchor).total_seconds() // SECONDS_PER_DAY)
    return max(0, days)


def preview(card: dict, last_review: dict | None, now: datetime | None = None) -> list[tuple[str, int]]:
    """[('again', days), ('hard', days), ('good', days), ('easy', days)], read only."""
    now = now or utcnow()
    arms = predict(memory_from_review(last_review), elapsed_days(card, last_review, now))
    return [(RATING_LABELS[rating], round(arms[rating]['interval'])) for rating in RATINGS]


def schedule(card: dict, last_review: dict | None, rating: int, now: datetime | None = None) -> dict:
    """
    Given a card dict (from DB), its latest review and a rating (1-4),
    returns the review to append plus the card's next show date.

    Returns dict with: card_id, last_interval, interval, review_time,
    stability, difficulty, next_show_date
    """
    if rating not in RATINGS:
        raise InvalidRatingError(f"invalid rating {rating!r}")

    now = now or utcnow()
    days = elapsed_days(card, last_review, now)
    chosen = predict(memory_from_review(last_review), days)[rating]
    interval = round(chosen['interval'])

    return {
        'card_id': card['id'],
        'last_interval': days,
        'interval': interval,
        'review_time': now,
        'stability': chosen['stability'],
        'difficulty': chosen['difficulty'],
        'next_show_date': now + timedelta(days=interval),
    }


def format_interval(days: int) -> str:
    if days == 1:
        return 'in 1 day'
    return f"in {days} days"
