"""Database models for word sets, word pairs and practice history."""
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from examiner.config import DEFAULT_EASE_FACTOR
from examiner.models.base import Base, TimestampMixin, utcnow


class WordSet(Base, TimestampMixin):
    """A named list of word pairs in two languages."""

    __tablename__ = "word_sets"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    language_a = Column(String, nullable=False)  # e.g., "nl"
    language_b = Column(String, nullable=False)  # e.g., "en"

    # Relationships
    pairs = relationship(
        "WordPair", back_populates="word_set", cascade="all, delete-orphan"
    )
    sessions = relationship(
        "PracticeSession", back_populates="word_set", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<WordSet {self.id} {self.name!r} {self.language_a}-{self.language_b}>"


class WordPair(Base, TimestampMixin):
    """A term in language A with its counterpart in language B."""

    __tablename__ = "word_pairs"

    id = Column(Integer, primary_key=True)
    set_id = Column(Integer, ForeignKey("word_sets.id", ondelete="CASCADE"), nullable=False, index=True)
    term_a = Column(String, nullable=False)
    term_b = Column(String, nullable=False)
    ease_factor = Column(Float, nullable=False, default=DEFAULT_EASE_FACTOR)
    interval = Column(Integer, nullable=False, default=0)  # days
    next_review = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    correct_count = Column(Integer, nullable=False, default=0)
    incorrect_count = Column(Integer, nullable=False, default=0)
    last_practice = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    word_set = relationship("WordSet", back_populates="pairs")

    def __repr__(self) -> str:
        return f"<WordPair {self.id} {self.term_a!r}={self.term_b!r}>"


class PracticeSession(Base):
    """A completed practice run. Rows are only ever inserted."""

    __tablename__ = "practice_sessions"

    id = Column(Integer, primary_key=True)
    run_id = Column(String, unique=True, nullable=False)
    set_id = Column(Integer, ForeignKey("word_sets.id", ondelete="CASCADE"), nullable=False, index=True)
    mode = Column(String, nullable=False)  # flashcard, typing, multiple-choice, quick
    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    total_questions = Column(Integer, nullable=False, default=0)
    correct_answers = Column(Integer, nullable=False, default=0)
    incorrect_answers = Column(Integer, nullable=False, default=0)

    # Relationships
    word_set = relationship("WordSet", back_populates="sessions")
    reviewed_pairs = relationship(
        "ReviewedPairRecord",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ReviewedPairRecord.position",
    )


class ReviewedPairRecord(Base):
    """Snapshot of one answered question inside a practice session."""

    __tablename__ = "reviewed_pairs"

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("practice_sessions.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    # Not a foreign key: the snapshot survives edits and deletion of the pair
    pair_id = Column(Integer, nullable=False)
    term_a = Column(String, nullable=False)
    term_b = Column(String, nullable=False)
    user_answer = Column(String, nullable=True)
    correct = Column(Boolean, nullable=False)
    time_spent = Column(Integer, nullable=True)  # milliseconds

    # Relationships
    session = relationship("PracticeSession", back_populates="reviewed_pairs")
