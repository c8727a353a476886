"""Service connecting practice runs with stored word pair progress."""
import logging
from datetime import datetime, UTC
from typing import Optional, Set

from sqlalchemy.exc import SQLAlchemyError

from examiner.errors import NotFoundError, PersistenceError
from examiner.models.models import PracticeSession, WordPair
from examiner.models.practice_models import PracticeMode, ReviewSchedule
from examiner.monitoring import persistence_errors, sessions_completed
from examiner.services.practice_run import PracticeRun
from examiner.services.spaced_repetition import calculate_next_review, quality_from_answer
from examiner.services.word_set_service import WordSetService

logger = logging.getLogger(__name__)


class PracticeService:
    """Persists graded answers and completed practice sessions."""

    def __init__(self, word_set_service: WordSetService):
        """Initialize the service with the word set repository."""
        self.word_set_service = word_set_service
        self._saved_runs: Set[str] = set()

    def _fail(self, operation: str, error: Exception) -> PersistenceError:
        self.word_set_service.db.rollback()
        persistence_errors.labels(operation=operation).inc()
        logger.error(f"{operation} failed: {error}")
        return PersistenceError(operation, str(error))

    def record_answer(
        self, pair: WordPair, is_correct: bool, elapsed_ms: Optional[int] = None
    ) -> ReviewSchedule:
        """Schedule the next review of a pair and update its counters."""
        quality = quality_from_answer(is_correct, elapsed_ms)
        schedule = calculate_next_review(quality, pair.ease_factor, pair.interval)
        logger.debug(f"Pair {pair.id}: quality {quality}, next interval {schedule.interval}d")
        try:
            self.word_set_service.update_pair_stats(
                pair.id,
                ease_factor=schedule.ease_factor,
                interval=schedule.interval,
                next_review=schedule.next_review,
                correct_count=pair.correct_count + (1 if is_correct else 0),
                incorrect_count=pair.incorrect_count + (0 if is_correct else 1),
                last_practice=datetime.now(UTC),
            )
        except (SQLAlchemyError, NotFoundError) as e:
            raise self._fail("record_answer", e) from e
        return schedule

    def record_quick_answer(self, pair: WordPair, is_correct: bool) -> None:
        """Update only the counters of a pair, leaving its schedule alone."""
        try:
            self.word_set_service.update_pair_stats(
                pair.id,
                correct_count=pair.correct_count + (1 if is_correct else 0),
                incorrect_count=pair.incorrect_count + (0 if is_correct else 1),
                last_practice=datetime.now(UTC),
            )
        except (SQLAlchemyError, NotFoundError) as e:
            raise self._fail("record_quick_answer", e) from e

    def save_session(
        self,
        run: PracticeRun,
        set_id: int,
        mode: PracticeMode,
        started_at: datetime,
    ) -> Optional[PracticeSession]:
        """Store a completed run once.

        Returns None when the run is not complete yet or has already been saved,
        so observing the completed state repeatedly never creates duplicates.
        """
        if not run.is_complete or run.run_id in self._saved_runs:
            return None

        stats = run.get_stats()
        try:
            session = self.word_set_service.add_practice_session(
                run_id=run.run_id,
                set_id=set_id,
                mode=mode.value,
                started_at=started_at,
                completed_at=datetime.now(UTC),
                total_questions=stats.total,
                correct_answers=stats.correct,
                incorrect_answers=stats.incorrect,
                reviewed_pairs=run.reviewed_pairs,
            )
        except (SQLAlchemyError, NotFoundError) as e:
            raise self._fail("save_session", e) from e

        self._saved_runs.add(run.run_id)
        sessions_completed.labels(mode=mode.value).inc()
        logger.info(
            f"Saved session {session.id} for set {set_id}: "
            f"{stats.correct}/{stats.total} ({stats.percentage}%)"
        )
        return session
