"""Tests for the word set repository."""
from datetime import datetime, timedelta, UTC

import pytest
from faker import Faker
from sqlalchemy.orm import Session

from conftest import make_terms
from examiner.errors import NotFoundError
from examiner.models.models import PracticeSession, ReviewedPairRecord, WordPair, WordSet
from examiner.models.practice_models import ReviewedPair
from examiner.services.word_set_service import WordSetService

fake = Faker()


def test_create_word_set(word_set_service: WordSetService) -> None:
    """Test creating a set with pairs at their default schedule."""
    terms = make_terms(3)
    word_set = word_set_service.create_word_set("Animals", "nl", "en", terms)
    assert word_set.id is not None
    assert word_set.created_at is not None

    pairs = word_set_service.get_word_pairs(word_set.id)
    assert [(p.term_a, p.term_b) for p in pairs] == terms
    for pair in pairs:
        assert pair.ease_factor == 2.5
        assert pair.interval == 0
        assert pair.correct_count == 0
        assert pair.incorrect_count == 0
        assert pair.last_practice is None
        assert pair.next_review is not None


def test_get_missing_returns_none(word_set_service: WordSetService) -> None:
    """Test lookups of unknown ids."""
    assert word_set_service.get_word_set(999) is None
    assert word_set_service.get_word_pair(999) is None
    assert word_set_service.get_word_pairs(999) == []


def test_unknown_ids_raise(word_set_service: WordSetService) -> None:
    """Test that mutations of unknown ids raise NotFoundError."""
    with pytest.raises(NotFoundError):
        word_set_service.update_word_set(999, name="x")
    with pytest.raises(NotFoundError):
        word_set_service.delete_word_set(999)
    with pytest.raises(NotFoundError):
        word_set_service.add_word_pair(999, "a", "b")
    with pytest.raises(NotFoundError):
        word_set_service.update_pair_stats(999, interval=1)
    with pytest.raises(ValueError):
        word_set_service.reset_set_stats(999)


def test_list_word_sets_most_recent_first(word_set_service: WordSetService) -> None:
    """Test that the most recently updated set comes first."""
    first = word_set_service.create_word_set("First", "nl", "en")
    second = word_set_service.create_word_set("Second", "nl", "de")
    assert [s.id for s in word_set_service.list_word_sets()] == [second.id, first.id]

    word_set_service.add_word_pair(first.id, "huis", "house")
    assert word_set_service.list_word_sets()[0].id == first.id


def test_update_word_set(word_set_service: WordSetService, word_set: WordSet) -> None:
    """Test renaming a set."""
    updated = word_set_service.update_word_set(word_set.id, name="Renamed", language_b="fr")
    assert updated.name == "Renamed"
    assert updated.language_b == "fr"


def test_delete_word_set_removes_pairs_and_sessions(
    db: Session, word_set_service: WordSetService, word_set: WordSet
) -> None:
    """Test that deleting a set deletes everything it owns."""
    word_set_service.add_practice_session(
        run_id=fake.uuid4(),
        set_id=word_set.id,
        mode="flashcard",
        started_at=datetime.now(UTC),
        completed_at=datetime.now(UTC),
        total_questions=1,
        correct_answers=1,
        incorrect_answers=0,
        reviewed_pairs=[ReviewedPair(pair_id=1, term_a="a", term_b="b", correct=True)],
    )
    word_set_service.delete_word_set(word_set.id)
    assert db.query(WordSet).count() == 0
    assert db.query(WordPair).count() == 0
    assert db.query(PracticeSession).count() == 0
    assert db.query(ReviewedPairRecord).count() == 0


def test_edit_and_delete_pairs(word_set_service: WordSetService, word_set: WordSet) -> None:
    """Test editing and removing a single pair."""
    pair = word_set_service.add_word_pair(word_set.id, "fiets", "bike")
    assert len(word_set_service.get_word_pairs(word_set.id)) == 6

    updated = word_set_service.update_word_pair(pair.id, term_b="bicycle")
    assert updated.term_b == "bicycle"
    assert updated.term_a == "fiets"

    word_set_service.delete_word_pair(pair.id)
    assert word_set_service.get_word_pair(pair.id) is None
    assert len(word_set_service.get_word_pairs(word_set.id)) == 5


def test_update_pair_stats_rejects_unknown_fields(word_set_service: WordSetService, word_set: WordSet) -> None:
    """Test that only scheduling and counter fields can be written."""
    pair = word_set_service.get_word_pairs(word_set.id)[0]
    with pytest.raises(ValueError):
        word_set_service.update_pair_stats(pair.id, term_a="sneaky")


def test_reset_set_stats(db: Session, word_set_service: WordSetService, word_set: WordSet) -> None:
    """Test the bulk reset of every pair in a set."""
    for pair in word_set_service.get_word_pairs(word_set.id):
        word_set_service.update_pair_stats(
            pair.id,
            ease_factor=1.9,
            interval=15,
            next_review=datetime.now(UTC) + timedelta(days=15),
            correct_count=4,
            incorrect_count=2,
            last_practice=datetime.now(UTC),
        )

    assert word_set_service.reset_set_stats(word_set.id) == 5
    db.expire_all()
    for pair in word_set_service.get_word_pairs(word_set.id):
        assert (pair.correct_count, pair.incorrect_count) == (0, 0)
        assert pair.ease_factor == 2.5
        assert pair.interval == 0
        assert pair.last_practice is None
    assert len(word_set_service.get_due_pairs(word_set.id)) == 5


def test_get_due_pairs(word_set_service: WordSetService, word_set: WordSet) -> None:
    """Test that only due pairs are returned, most overdue first."""
    now = datetime.now(UTC)
    pairs = word_set_service.get_word_pairs(word_set.id)
    offsets = [-1, -5, 3, -2, 10]
    for pair, days in zip(pairs, offsets):
        word_set_service.update_pair_stats(pair.id, next_review=now + timedelta(days=days))

    due = word_set_service.get_due_pairs(word_set.id, now=now)
    assert [p.id for p in due] == [pairs[1].id, pairs[3].id, pairs[0].id]


def test_set_summary(word_set_service: WordSetService, word_set: WordSet) -> None:
    """Test the overview counts of a set."""
    pair = word_set_service.get_word_pairs(word_set.id)[0]
    word_set_service.update_pair_stats(
        pair.id,
        interval=6,
        next_review=datetime.now(UTC) + timedelta(days=6),
        correct_count=3,
        incorrect_count=1,
    )
    summary = word_set_service.get_set_summary(word_set.id)
    assert summary == {
        "pairs": 5,
        "due": 4,
        "mastered": 1,
        "correct": 3,
        "incorrect": 1,
        "sessions": 0,
    }


def test_practice_sessions_are_stored_with_snapshots(word_set_service: WordSetService, word_set: WordSet) -> None:
    """Test storing sessions and reading them back newest first."""
    reviewed = [
        ReviewedPair(pair_id=1, term_a="kat", term_b="cat", correct=False, time_spent=4200, user_answer="cut"),
        ReviewedPair(pair_id=1, term_a="kat", term_b="cat", correct=True, time_spent=1800),
    ]
    older = word_set_service.add_practice_session(
        run_id=fake.uuid4(),
        set_id=word_set.id,
        mode="typing",
        started_at=datetime.now(UTC),
        completed_at=datetime.now(UTC),
        total_questions=1,
        correct_answers=0,
        incorrect_answers=1,
        reviewed_pairs=reviewed,
    )
    newer = word_set_service.add_practice_session(
        run_id=fake.uuid4(),
        set_id=word_set.id,
        mode="flashcard",
        started_at=datetime.now(UTC),
        completed_at=None,
        total_questions=0,
        correct_answers=0,
        incorrect_answers=0,
        reviewed_pairs=[],
    )

    sessions = word_set_service.get_practice_sessions(word_set.id)
    assert [s.id for s in sessions] == [newer.id, older.id]
    assert [r.correct for r in older.reviewed_pairs] == [False, True]
    assert older.reviewed_pairs[0].user_answer == "cut"
    assert older.reviewed_pairs[0].time_spent == 4200
    assert word_set_service.get_practice_session_by_run(older.run_id).id == older.id
    assert len(word_set_service.get_all_practice_sessions()) == 2


def test_subscribers_are_notified(word_set_service: WordSetService) -> None:
    """Test change notifications for subscribed listeners."""
    events = []

    def listener(event: str, entity_id: int) -> None:
        events.append((event, entity_id))

    word_set_service.subscribe(listener)
    word_set = word_set_service.create_word_set("Colors", "nl", "en", [("rood", "red")])
    pair = word_set_service.get_word_pairs(word_set.id)[0]
    word_set_service.update_pair_stats(pair.id, correct_count=1)
    word_set_service.unsubscribe(listener)
    word_set_service.delete_word_set(word_set.id)

    assert events == [("set_created", word_set.id), ("pair_updated", pair.id)]


if __name__ == "__main__":
    pytest.main([__file__])
