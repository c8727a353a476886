"""SM-2 style scheduling of word pair reviews."""
from datetime import UTC, datetime, timedelta
from typing import List, Optional, Sequence

from examiner.config import settings
from examiner.models.practice_models import ReviewSchedule


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as SQLite returns them) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def calculate_next_review(
    quality: int,
    ease_factor: float,
    interval: int,
    now: Optional[datetime] = None,
) -> ReviewSchedule:
    """Calculate the next interval and ease factor after a review of the given quality."""
    if quality < 3:
        new_interval = 1
    elif interval == 0:
        new_interval = 1
    elif interval == 1:
        new_interval = 6
    else:
        new_interval = round(interval * ease_factor)

    # Always derived from the ease factor the pair had before this review
    miss = 5 - quality
    new_ease = max(
        settings.practice.min_ease_factor,
        ease_factor + (0.1 - miss * (0.08 + miss * 0.02)),
    )

    now = now or datetime.now(UTC)
    return ReviewSchedule(
        ease_factor=new_ease,
        interval=new_interval,
        next_review=now + timedelta(days=new_interval),
    )


def quality_from_answer(is_correct: bool, elapsed_ms: Optional[int] = None) -> int:
    """Grade a single answer from 0 to 5 using correctness and response time."""
    if not is_correct:
        return 0
    if elapsed_ms and elapsed_ms < settings.practice.fast_answer_ms:
        return 5
    if elapsed_ms and elapsed_ms < settings.practice.medium_answer_ms:
        return 4
    return 3


def words_for_review(pairs: Sequence, now: Optional[datetime] = None) -> List[int]:
    """Indices of pairs due for review, most overdue first.

    Each pair needs `next_review` and `ease_factor` attributes. Pairs that are
    overdue by exactly the same amount are ordered by ease factor, highest first.
    """
    now = now or datetime.now(UTC)
    due = [
        (now - as_utc(pair.next_review), pair.ease_factor, index)
        for index, pair in enumerate(pairs)
        if as_utc(pair.next_review) <= now
    ]
    due.sort(key=lambda item: (item[0], item[1]), reverse=True)
    return [index for _, _, index in due]
