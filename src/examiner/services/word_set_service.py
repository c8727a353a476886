"""Service for storing word sets, word pairs and practice history."""
import logging
from datetime import datetime, UTC
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from examiner.config import settings
from examiner.errors import NotFoundError
from examiner.models.models import PracticeSession, ReviewedPairRecord, WordPair, WordSet
from examiner.models.practice_models import ReviewedPair
from examiner.services.spaced_repetition import words_for_review

logger = logging.getLogger(__name__)

# Called with (event, entity_id) after every committed change
Listener = Callable[[str, int], None]

# Interval from which the scheduler starts growing reviews by the ease factor
MASTERED_INTERVAL = 6

PAIR_STAT_FIELDS = (
    "ease_factor",
    "interval",
    "next_review",
    "correct_count",
    "incorrect_count",
    "last_practice",
)


class WordSetService:
    """Repository for word sets and everything they own."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        """Register a callback for change notifications."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        """Remove a previously registered callback."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: str, entity_id: int) -> None:
        for listener in list(self._listeners):
            listener(event, entity_id)

    def _touch(self, word_set: WordSet) -> None:
        word_set.updated_at = datetime.now(UTC)

    # Word sets

    def create_word_set(
        self,
        name: str,
        language_a: str,
        language_b: str,
        pairs: Iterable[Tuple[str, str]] = (),
    ) -> WordSet:
        """Create a word set together with its initial pairs."""
        now = datetime.now(UTC)
        word_set = WordSet(
            name=name,
            language_a=language_a,
            language_b=language_b,
            created_at=now,
            updated_at=now,
        )
        for term_a, term_b in pairs:
            word_set.pairs.append(self._new_pair(term_a, term_b, now))
        self.db.add(word_set)
        self.db.commit()
        self.db.refresh(word_set)
        logger.info(f"Created word set {word_set.id} with {len(word_set.pairs)} pairs")
        self._notify("set_created", word_set.id)
        return word_set

    def get_word_set(self, set_id: int) -> Optional[WordSet]:
        """Get a word set by its ID."""
        return self.db.query(WordSet).filter(WordSet.id == set_id).first()

    def _require_word_set(self, set_id: int) -> WordSet:
        word_set = self.get_word_set(set_id)
        if not word_set:
            raise NotFoundError(f"Word set {set_id} not found")
        return word_set

    def list_word_sets(self) -> List[WordSet]:
        """All word sets, most recently updated first."""
        return self.db.query(WordSet).order_by(WordSet.updated_at.desc(), WordSet.id.desc()).all()

    def update_word_set(self, set_id: int, **kwargs) -> WordSet:
        """Update a word set's attributes."""
        word_set = self._require_word_set(set_id)
        for key in ("name", "language_a", "language_b"):
            if key in kwargs:
                setattr(word_set, key, kwargs[key])
        self._touch(word_set)
        self.db.commit()
        self.db.refresh(word_set)
        self._notify("set_updated", set_id)
        return word_set

    def delete_word_set(self, set_id: int) -> None:
        """Delete a word set with its pairs and practice history."""
        word_set = self._require_word_set(set_id)
        self.db.delete(word_set)
        self.db.commit()
        logger.info(f"Deleted word set {set_id}")
        self._notify("set_deleted", set_id)

    # Word pairs

    @staticmethod
    def _new_pair(term_a: str, term_b: str, now: datetime) -> WordPair:
        return WordPair(
            term_a=term_a,
            term_b=term_b,
            ease_factor=settings.practice.default_ease_factor,
            interval=0,
            next_review=now,
            correct_count=0,
            incorrect_count=0,
        )

    def add_word_pair(self, set_id: int, term_a: str, term_b: str) -> WordPair:
        """Add a pair to a set."""
        word_set = self._require_word_set(set_id)
        pair = self._new_pair(term_a, term_b, datetime.now(UTC))
        word_set.pairs.append(pair)
        self._touch(word_set)
        self.db.commit()
        self.db.refresh(pair)
        self._notify("pair_created", pair.id)
        return pair

    def get_word_pair(self, pair_id: int) -> Optional[WordPair]:
        """Get a word pair by its ID."""
        return self.db.query(WordPair).filter(WordPair.id == pair_id).first()

    def _require_word_pair(self, pair_id: int) -> WordPair:
        pair = self.get_word_pair(pair_id)
        if not pair:
            raise NotFoundError(f"Word pair {pair_id} not found")
        return pair

    def get_word_pairs(self, set_id: int) -> List[WordPair]:
        """All pairs belonging to a set."""
        return (
            self.db.query(WordPair)
            .filter(WordPair.set_id == set_id)
            .order_by(WordPair.id)
            .all()
        )

    def update_word_pair(self, pair_id: int, **kwargs) -> WordPair:
        """Edit the terms of a pair."""
        pair = self._require_word_pair(pair_id)
        for key in ("term_a", "term_b"):
            if key in kwargs:
                setattr(pair, key, kwargs[key])
        self._touch(pair.word_set)
        self.db.commit()
        self.db.refresh(pair)
        self._notify("pair_updated", pair_id)
        return pair

    def delete_word_pair(self, pair_id: int) -> None:
        """Remove a pair from its set."""
        pair = self._require_word_pair(pair_id)
        self._touch(pair.word_set)
        self.db.delete(pair)
        self.db.commit()
        self._notify("pair_deleted", pair_id)

    def update_pair_stats(self, pair_id: int, **stats: Any) -> WordPair:
        """Write scheduling and counter fields of a single pair."""
        pair = self._require_word_pair(pair_id)
        for key, value in stats.items():
            if key not in PAIR_STAT_FIELDS:
                raise ValueError(f"Unknown pair stat: {key}")
            setattr(pair, key, value)
        self.db.commit()
        self._notify("pair_updated", pair_id)
        return pair

    def reset_set_stats(self, set_id: int) -> int:
        """Reset scheduling and counters of every pair in a set. Returns the pair count."""
        word_set = self._require_word_set(set_id)
        now = datetime.now(UTC)
        count = (
            self.db.query(WordPair)
            .filter(WordPair.set_id == set_id)
            .update(
                {
                    WordPair.correct_count: 0,
                    WordPair.incorrect_count: 0,
                    WordPair.ease_factor: settings.practice.default_ease_factor,
                    WordPair.interval: 0,
                    WordPair.next_review: now,
                    WordPair.last_practice: None,
                },
                synchronize_session="fetch",
            )
        )
        self._touch(word_set)
        self.db.commit()
        logger.info(f"Reset stats of {count} pairs in set {set_id}")
        self._notify("set_reset", set_id)
        return count

    def get_due_pairs(self, set_id: int, now: Optional[datetime] = None) -> List[WordPair]:
        """Pairs of a set that are due, most overdue first."""
        pairs = self.get_word_pairs(set_id)
        return [pairs[index] for index in words_for_review(pairs, now)]

    def get_set_summary(self, set_id: int) -> Dict[str, int]:
        """Counts shown on a set's overview."""
        pairs = self.get_word_pairs(set_id)
        return {
            "pairs": len(pairs),
            "due": len(words_for_review(pairs)),
            "mastered": sum(1 for pair in pairs if pair.interval >= MASTERED_INTERVAL),
            "correct": sum(pair.correct_count for pair in pairs),
            "incorrect": sum(pair.incorrect_count for pair in pairs),
            "sessions": len(self.get_practice_sessions(set_id)),
        }

    # Practice sessions

    def add_practice_session(
        self,
        run_id: str,
        set_id: int,
        mode: str,
        started_at: datetime,
        completed_at: Optional[datetime],
        total_questions: int,
        correct_answers: int,
        incorrect_answers: int,
        reviewed_pairs: Iterable[ReviewedPair],
    ) -> PracticeSession:
        """Store a completed practice session with its answer snapshots."""
        self._require_word_set(set_id)
        session = PracticeSession(
            run_id=run_id,
            set_id=set_id,
            mode=mode,
            started_at=started_at,
            completed_at=completed_at,
            total_questions=total_questions,
            correct_answers=correct_answers,
            incorrect_answers=incorrect_answers,
        )
        for position, reviewed in enumerate(reviewed_pairs):
            session.reviewed_pairs.append(
                ReviewedPairRecord(
                    position=position,
                    pair_id=reviewed.pair_id,
                    term_a=reviewed.term_a,
                    term_b=reviewed.term_b,
                    user_answer=reviewed.user_answer,
                    correct=reviewed.correct,
                    time_spent=reviewed.time_spent,
                )
            )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        self._notify("session_created", session.id)
        return session

    def get_practice_session_by_run(self, run_id: str) -> Optional[PracticeSession]:
        """Get the session stored for a practice run, if any."""
        return self.db.query(PracticeSession).filter(PracticeSession.run_id == run_id).first()

    def get_practice_sessions(self, set_id: int) -> List[PracticeSession]:
        """Sessions of a set, newest first."""
        return (
            self.db.query(PracticeSession)
            .filter(PracticeSession.set_id == set_id)
            .order_by(PracticeSession.id.desc())
            .all()
        )

    def get_all_practice_sessions(self) -> List[PracticeSession]:
        """Every stored session."""
        return self.db.query(PracticeSession).order_by(PracticeSession.id).all()
