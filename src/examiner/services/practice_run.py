"""State machine for a single practice run over a list of word pairs.

A run starts in the first round with every pair shuffled into a queue. The
learner answers the current question and advances. When a round ends with
missed pairs, a retry round over exactly those pairs starts automatically.
The run is complete once a round ends without misses.

Statistics reported for a run always describe the first round, so retry
rounds can drill the missed pairs without changing the headline score. Every
answer, including those in retry rounds, is still kept in the review log.
"""
import logging
import random
import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Set, Union

from examiner.models.practice_models import (
    Direction,
    PracticeConfig,
    Question,
    ReviewedPair,
    SessionStats,
)
from examiner.monitoring import retry_rounds

logger = logging.getLogger(__name__)


class Round(Enum):
    """Kind of round an active run is in."""
    FIRST = "first"
    RETRY = "retry"


@dataclass
class ActiveState:
    """A run that still has questions to ask."""
    round: Round
    queue: list
    position: int = 0
    missed: Set[int] = field(default_factory=set)
    correct: int = 0
    incorrect: int = 0


@dataclass
class CompleteState:
    """A run with nothing left to ask."""
    first_round_stats: Optional[SessionStats] = None


RunState = Union[ActiveState, CompleteState]


def shuffled(items: Sequence, rng: Optional[random.Random] = None) -> list:
    """Return a uniformly shuffled copy of items."""
    copy = list(items)
    (rng or random).shuffle(copy)
    return copy


def resolve_question(pair, direction: Direction, rng: Optional[random.Random] = None) -> Question:
    """Decide which side of a pair is asked and which side is expected.

    For Direction.RANDOM a coin is flipped on every call, so callers must keep
    the returned question for as long as the same question is on screen.
    """
    if direction == Direction.RANDOM:
        a_to_b = (rng or random).random() > 0.5
    else:
        a_to_b = direction == Direction.A_TO_B
    if a_to_b:
        return Question(pair_id=pair.id, prompt=pair.term_a, expected=pair.term_b)
    return Question(pair_id=pair.id, prompt=pair.term_b, expected=pair.term_a, a_to_b=False)


class PracticeRun:
    """One practice run with automatic retry rounds for missed pairs."""

    def __init__(
        self,
        pairs: Sequence,
        config: Optional[PracticeConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.pairs = list(pairs)
        self.config = config or PracticeConfig()
        self.rng = rng or random.Random()
        self.reset()

    def reset(self) -> None:
        """Start over with a freshly shuffled first round and an empty log."""
        self.run_id = uuid.uuid4().hex
        self.reviewed_pairs: List[ReviewedPair] = []
        self.first_round_stats: Optional[SessionStats] = None
        self.rounds_started = 1
        self._question: Optional[Question] = None
        if self.pairs:
            self.state: RunState = ActiveState(round=Round.FIRST, queue=shuffled(self.pairs, self.rng))
        else:
            self.state = CompleteState()

    @property
    def is_complete(self) -> bool:
        return isinstance(self.state, CompleteState)

    @property
    def is_retry_round(self) -> bool:
        return isinstance(self.state, ActiveState) and self.state.round == Round.RETRY

    @property
    def current_index(self) -> int:
        return self.state.position if isinstance(self.state, ActiveState) else 0

    @property
    def total_questions(self) -> int:
        """Number of questions in the current round."""
        return len(self.state.queue) if isinstance(self.state, ActiveState) else 0

    @property
    def progress(self) -> float:
        """Percentage of the current round already advanced past."""
        if self.is_complete:
            return 100.0
        return self.current_index / self.total_questions * 100

    def current_pair(self):
        """The pair being asked, or None once the run is complete."""
        state = self.state
        if isinstance(state, ActiveState) and state.position < len(state.queue):
            return state.queue[state.position]
        return None

    def current_question(self) -> Optional[Question]:
        """The current pair resolved into prompt and expected answer.

        The resolution is cached until the run advances, so a random direction
        does not flip between calls for the same question.
        """
        pair = self.current_pair()
        if pair is None:
            return None
        if self._question is None:
            self._question = resolve_question(pair, self.config.direction, self.rng)
        return self._question

    def answer(
        self,
        is_correct: bool,
        elapsed_ms: Optional[int] = None,
        user_answer: Optional[str] = None,
    ) -> Optional[ReviewedPair]:
        """Record an answer for the current pair without moving on.

        Returns the logged snapshot, or None when there is no current question.
        """
        pair = self.current_pair()
        if pair is None:
            return None

        reviewed = ReviewedPair(
            pair_id=pair.id,
            term_a=pair.term_a,
            term_b=pair.term_b,
            correct=is_correct,
            time_spent=elapsed_ms,
            user_answer=user_answer,
        )
        self.reviewed_pairs.append(reviewed)

        state = self.state
        if is_correct:
            state.correct += 1
        else:
            state.incorrect += 1
            state.missed.add(pair.id)
        return reviewed

    def advance(self) -> None:
        """Move to the next question, starting a retry round or completing as needed."""
        state = self.state
        if not isinstance(state, ActiveState):
            return

        state.position += 1
        self._question = None
        if state.position < len(state.queue):
            return

        if not state.missed:
            logger.debug(f"Run {self.run_id} complete after {self.rounds_started} round(s)")
            self.state = CompleteState(first_round_stats=self.first_round_stats)
            return

        if state.round == Round.FIRST:
            self.first_round_stats = SessionStats(
                correct=state.correct,
                incorrect=state.incorrect,
                total=state.correct + state.incorrect,
            )

        seen = set()
        retry_queue = []
        for pair in state.queue:
            if pair.id in state.missed and pair.id not in seen:
                seen.add(pair.id)
                retry_queue.append(pair)

        self.state = ActiveState(round=Round.RETRY, queue=shuffled(retry_queue, self.rng))
        self.rounds_started += 1
        retry_rounds.inc()
        logger.debug(f"Run {self.run_id} retrying {len(retry_queue)} missed pair(s)")

    def get_stats(self) -> SessionStats:
        """Statistics of the first round, or of the whole log if no retry was needed."""
        if self.first_round_stats is not None:
            return self.first_round_stats
        correct = sum(1 for reviewed in self.reviewed_pairs if reviewed.correct)
        return SessionStats(
            correct=correct,
            incorrect=len(self.reviewed_pairs) - correct,
            total=len(self.reviewed_pairs),
        )


class DrillQueue:
    """Queue that repeats a pair until it has been answered correctly once.

    A wrong answer sends the pair to the back of the queue. A right answer
    removes it. There are no rounds and no scheduling.
    """

    def __init__(self, pairs: Sequence, rng: Optional[random.Random] = None):
        self.pairs = list(pairs)
        self.rng = rng or random.Random()
        self.reset()

    def reset(self) -> None:
        """Reshuffle all pairs and forget progress."""
        self.queue = deque(shuffled(self.pairs, self.rng))
        self.mastered: Set[int] = set()
        self.correct = 0
        self.incorrect = 0
        self.attempts = 0

    @property
    def is_complete(self) -> bool:
        return not self.queue

    @property
    def total(self) -> int:
        return len(self.pairs)

    @property
    def progress(self) -> float:
        """Percentage of pairs answered correctly at least once."""
        if not self.pairs:
            return 0.0
        return len(self.mastered) / len(self.pairs) * 100

    def current_pair(self):
        return self.queue[0] if self.queue else None

    def answer(self, is_correct: bool) -> bool:
        """Grade the pair at the front of the queue. Returns False if the queue is empty."""
        if not self.queue:
            return False
        pair = self.queue.popleft()
        self.attempts += 1
        if is_correct:
            self.correct += 1
            self.mastered.add(pair.id)
        else:
            self.incorrect += 1
            self.queue.append(pair)
        return True
