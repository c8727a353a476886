"""Practice modes: how questions are presented and answers graded."""
import logging
import random
import time
from abc import ABC, abstractmethod
from datetime import datetime, UTC
from typing import final, List, Optional, Sequence

from examiner.config import settings
from examiner.errors import PersistenceError
from examiner.models.models import PracticeSession
from examiner.models.practice_models import (
    AnswerOutcome,
    PracticeConfig,
    PracticeMode,
    Question,
    SessionStats,
)
from examiner.monitoring import questions_answered
from examiner.services.fuzzy_match import is_accepted, match, match_feedback, wrong_answer_feedback
from examiner.services.practice_run import DrillQueue, PracticeRun, resolve_question, shuffled
from examiner.services.practice_service import PracticeService
from examiner.services.spaced_repetition import quality_from_answer

logger = logging.getLogger(__name__)


class BasePracticeMode(ABC):
    """Base class for modes that run on a PracticeRun.

    Subclasses grade the answer; this class records it on the run, persists
    the new schedule of the pair and stores the session once the run is done.
    A failed write is logged and reported on the outcome, never undone.
    """

    """Fields and methods that must be implemented by subclasses."""
    type: PracticeMode

    @abstractmethod
    def submit(self, *args, **kwargs) -> Optional[AnswerOutcome]:
        """Grade the learner's answer to the current question. Must be implemented by subclasses."""
        raise NotImplementedError("Subclasses must implement this method")

    def _on_new_question(self) -> None:
        """Reset per-question state. Called whenever the question changes."""

    """Fields and methods that must not be overridden by subclasses."""

    @final
    def __init__(
        self,
        pairs: Sequence,
        practice_service: PracticeService,
        config: Optional[PracticeConfig] = None,
        set_id: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        self.pairs = list(pairs)
        self.practice_service = practice_service
        self.config = config or PracticeConfig(mode=self.type)
        self.set_id = set_id
        self.rng = rng or random.Random()
        self.run = PracticeRun(self.pairs, self.config, self.rng)
        self.started_at = datetime.now(UTC)
        self.saved_session: Optional[PracticeSession] = None
        self.last_error: Optional[str] = None
        self._start_question()

    @final
    def _start_question(self) -> None:
        self.outcome: Optional[AnswerOutcome] = None
        self._asked_at = time.monotonic()
        self._on_new_question()

    @property
    def is_complete(self) -> bool:
        return self.run.is_complete

    @property
    def stats(self) -> SessionStats:
        return self.run.get_stats()

    @final
    def current_question(self) -> Optional[Question]:
        return self.run.current_question()

    @final
    def _elapsed_ms(self, elapsed_ms: Optional[int]) -> int:
        if elapsed_ms is not None:
            return elapsed_ms
        return int((time.monotonic() - self._asked_at) * 1000)

    @final
    def _record(
        self,
        is_correct: bool,
        elapsed_ms: Optional[int],
        user_answer: Optional[str] = None,
        feedback: Optional[str] = None,
    ) -> Optional[AnswerOutcome]:
        """Log the answer on the run and persist the pair's new schedule."""
        pair = self.run.current_pair()
        if pair is None:
            return None
        # A second submit for the same question changes nothing
        if self.outcome is not None:
            return self.outcome

        elapsed_ms = self._elapsed_ms(elapsed_ms)
        self.run.answer(is_correct, elapsed_ms, user_answer)
        questions_answered.labels(
            mode=self.type.value, result="correct" if is_correct else "incorrect"
        ).inc()

        self.outcome = AnswerOutcome(
            is_correct=is_correct,
            feedback=feedback,
            quality=quality_from_answer(is_correct, elapsed_ms),
        )
        try:
            self.outcome.schedule = self.practice_service.record_answer(pair, is_correct, elapsed_ms)
        except PersistenceError as e:
            logger.warning(f"Answer for pair {pair.id} kept in memory only: {e}")
            self.outcome.error = str(e)
            self.last_error = str(e)
        return self.outcome

    @final
    def next(self) -> None:
        """Move on to the next question and save the session when the run is done."""
        self.run.advance()
        self._start_question()
        if self.run.is_complete:
            self.save_session()

    @final
    def save_session(self) -> Optional[PracticeSession]:
        """Store the completed run once. Safe to call repeatedly."""
        if self.set_id is None or self.saved_session is not None:
            return self.saved_session
        try:
            self.saved_session = self.practice_service.save_session(
                self.run, self.set_id, self.type, self.started_at
            )
        except PersistenceError as e:
            logger.warning(f"Session for set {self.set_id} not saved: {e}")
            self.last_error = str(e)
        return self.saved_session

    @final
    def reset(self) -> None:
        """Start a fresh run over the same pairs."""
        self.run.reset()
        self.started_at = datetime.now(UTC)
        self.saved_session = None
        self.last_error = None
        self._start_question()


class FlashcardMode(BasePracticeMode):
    """Show the prompt, reveal the answer, let the learner grade themselves."""
    type: PracticeMode = PracticeMode.FLASHCARD

    def _on_new_question(self) -> None:
        self.revealed = False

    def reveal(self) -> Optional[str]:
        """Turn the card over and return the expected answer."""
        question = self.current_question()
        if question is None:
            return None
        self.revealed = True
        return question.expected

    def submit(self, knew_it: bool, elapsed_ms: Optional[int] = None) -> Optional[AnswerOutcome]:
        """Record the learner's own verdict."""
        return self._record(knew_it, elapsed_ms)


class TypingMode(BasePracticeMode):
    """Type the answer; graded by fuzzy matching."""
    type: PracticeMode = PracticeMode.TYPING

    def _on_new_question(self) -> None:
        self.retype_correct = False

    def submit(self, text: str, elapsed_ms: Optional[int] = None) -> Optional[AnswerOutcome]:
        """Grade a typed answer. Blank input is ignored."""
        question = self.current_question()
        if question is None or not text.strip():
            return None
        if self.outcome is not None:
            return self.outcome
        result = match(text, question.expected)
        return self._record(
            is_accepted(result),
            elapsed_ms,
            user_answer=text,
            feedback=match_feedback(result, question.expected),
        )

    def retype(self, text: str) -> bool:
        """Accept a corrected retype after a wrong answer.

        The earlier wrong answer stays recorded; this only marks that the
        learner now typed it right.
        """
        question = self.current_question()
        if question is None or self.outcome is None or self.outcome.is_correct:
            return False
        if not text.strip():
            return False
        if is_accepted(match(text, question.expected)):
            self.retype_correct = True
        return self.retype_correct


class MultipleChoiceMode(BasePracticeMode):
    """Pick the right answer among distractors taken from the other pairs."""
    type: PracticeMode = PracticeMode.MULTIPLE_CHOICE

    def _on_new_question(self) -> None:
        self._options: Optional[List[str]] = None

    def options(self) -> List[str]:
        """Options for the current question, fixed until the question changes."""
        question = self.current_question()
        if question is None:
            return []
        if self._options is None:
            self._options = self._build_options(question)
        return self._options

    def _build_options(self, question: Question) -> List[str]:
        candidates = []
        for pair in self.pairs:
            if pair.id == question.pair_id:
                continue
            answer = pair.term_b if question.a_to_b else pair.term_a
            if answer != question.expected and answer not in candidates:
                candidates.append(answer)
        count = min(len(candidates), settings.practice.choice_count - 1)
        distractors = self.rng.sample(candidates, count)
        return shuffled(distractors + [question.expected], self.rng)

    def submit(self, choice: str, elapsed_ms: Optional[int] = None) -> Optional[AnswerOutcome]:
        """Grade the chosen option by exact comparison."""
        question = self.current_question()
        if question is None:
            return None
        is_correct = choice == question.expected
        feedback = None if is_correct else wrong_answer_feedback(question.expected)
        return self._record(is_correct, elapsed_ms, user_answer=choice, feedback=feedback)


class QuickMode:
    """Drill every pair until it has been known once, without scheduling.

    Only the counters of a pair are saved; ease factor and interval are left
    alone and no session record is stored.
    """
    type: PracticeMode = PracticeMode.QUICK

    def __init__(
        self,
        pairs: Sequence,
        practice_service: PracticeService,
        config: Optional[PracticeConfig] = None,
        set_id: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        self.pairs = list(pairs)
        self.practice_service = practice_service
        self.config = config or PracticeConfig(mode=self.type)
        self.set_id = set_id
        self.rng = rng or random.Random()
        self.queue = DrillQueue(self.pairs, self.rng)
        self.last_error: Optional[str] = None
        self._question: Optional[Question] = None

    @property
    def is_complete(self) -> bool:
        return self.queue.is_complete

    @property
    def completed(self) -> int:
        return len(self.queue.mastered)

    @property
    def total(self) -> int:
        return self.queue.total

    @property
    def progress(self) -> float:
        return self.queue.progress

    @property
    def stats(self) -> SessionStats:
        return SessionStats(
            correct=self.queue.correct,
            incorrect=self.queue.incorrect,
            total=self.queue.correct + self.queue.incorrect,
        )

    def current_question(self) -> Optional[Question]:
        pair = self.queue.current_pair()
        if pair is None:
            return None
        if self._question is None:
            self._question = resolve_question(pair, self.config.direction, self.rng)
        return self._question

    def submit(self, knew_it: bool) -> Optional[AnswerOutcome]:
        """Grade the current pair and move on."""
        pair = self.queue.current_pair()
        if pair is None:
            return None
        question = self.current_question()
        self.queue.answer(knew_it)
        self._question = None
        questions_answered.labels(
            mode=self.type.value, result="correct" if knew_it else "incorrect"
        ).inc()

        outcome = AnswerOutcome(
            is_correct=knew_it,
            feedback=None if knew_it else wrong_answer_feedback(question.expected),
        )
        try:
            self.practice_service.record_quick_answer(pair, knew_it)
        except PersistenceError as e:
            logger.warning(f"Quick answer for pair {pair.id} kept in memory only: {e}")
            outcome.error = str(e)
            self.last_error = str(e)
        return outcome

    def reset(self) -> None:
        """Start the drill over."""
        self.queue.reset()
        self._question = None
        self.last_error = None


MODES = {
    PracticeMode.FLASHCARD: FlashcardMode,
    PracticeMode.TYPING: TypingMode,
    PracticeMode.MULTIPLE_CHOICE: MultipleChoiceMode,
    PracticeMode.QUICK: QuickMode,
}


def create_mode(
    pairs: Sequence,
    practice_service: PracticeService,
    config: PracticeConfig,
    set_id: Optional[int] = None,
    rng: Optional[random.Random] = None,
):
    """Instantiate the practice mode selected in the config."""
    mode_class = MODES[config.mode]
    logger.debug(f"Starting {config.mode.value} practice over {len(pairs)} pairs")
    return mode_class(pairs, practice_service, config=config, set_id=set_id, rng=rng)
