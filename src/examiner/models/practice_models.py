"""Models for practice-related data structures."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class PracticeMode(Enum):
    """Available practice modes."""
    FLASHCARD = "flashcard"  # Reveal and self-grade
    TYPING = "typing"  # Type the answer
    MULTIPLE_CHOICE = "multiple-choice"  # Choose from options
    QUICK = "quick"  # Drill until every pair is known


class Direction(Enum):
    """Which side of a pair is shown as the question."""
    A_TO_B = "a-to-b"
    B_TO_A = "b-to-a"
    RANDOM = "random"


class Difficulty(Enum):
    """Difficulty levels understood by the word pair generator."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


@dataclass
class PracticeConfig:
    """Options chosen before a practice run starts."""
    mode: PracticeMode = PracticeMode.FLASHCARD
    direction: Direction = Direction.A_TO_B
    show_progress: bool = True
    enable_speech: bool = False


@dataclass(frozen=True)
class Question:
    """A pair resolved into the side shown and the side expected."""
    pair_id: int
    prompt: str
    expected: str
    a_to_b: bool = True  # False when term B is shown and term A expected


@dataclass(frozen=True)
class ReviewedPair:
    """Snapshot of one answered question, immune to later edits of the pair."""
    pair_id: int
    term_a: str
    term_b: str
    correct: bool
    time_spent: Optional[int] = None  # milliseconds
    user_answer: Optional[str] = None


@dataclass(frozen=True)
class SessionStats:
    """Correct/incorrect totals reported for a practice run."""
    correct: int = 0
    incorrect: int = 0
    total: int = 0

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        return round(self.correct / self.total * 100)


@dataclass(frozen=True)
class MatchResult:
    """Outcome of comparing a typed answer with the expected answer."""
    is_exact: bool
    is_accent_match: bool
    is_fuzzy_match: bool
    is_close: bool
    distance: int


@dataclass(frozen=True)
class ReviewSchedule:
    """New scheduling state for a pair after one review."""
    ease_factor: float
    interval: int
    next_review: datetime


@dataclass
class AnswerOutcome:
    """Result of submitting an answer through a practice mode."""
    is_correct: bool
    feedback: Optional[str] = None
    quality: Optional[int] = None
    schedule: Optional[ReviewSchedule] = None
    error: Optional[str] = None  # set when saving the answer failed


@dataclass
class OcrWord:
    """A single recognized word with its bounding box."""
    text: str
    confidence: float
    bbox: tuple = (0, 0, 0, 0)


@dataclass
class OcrLine:
    """A line of recognized text."""
    text: str
    confidence: float
    words: List[OcrWord] = field(default_factory=list)


@dataclass
class OcrResult:
    """Everything an OCR engine recognized in one image."""
    text: str
    confidence: float
    lines: List[OcrLine] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedWordPair:
    """A word pair read from one line of text."""
    term_a: str
    term_b: str
    confidence: float
    line: int
