"""Tolerant comparison of typed answers against the expected answer."""
from typing import Optional

from examiner.models.practice_models import MatchResult

ACCENT_MAP = {
    "à": "a", "á": "a", "â": "a", "ã": "a", "ä": "a", "å": "a",
    "è": "e", "é": "e", "ê": "e", "ë": "e",
    "ì": "i", "í": "i", "î": "i", "ï": "i",
    "ò": "o", "ó": "o", "ô": "o", "õ": "o", "ö": "o",
    "ù": "u", "ú": "u", "û": "u", "ü": "u",
    "ý": "y", "ÿ": "y",
    "ñ": "n", "ç": "c", "ß": "ss",
    "œ": "oe", "æ": "ae",
}

_ACCENT_TABLE = str.maketrans(
    {**ACCENT_MAP, **{k.upper(): v for k, v in ACCENT_MAP.items() if k != "ß"}}
)


def remove_accents(text: str) -> str:
    """Fold the accented letters from ACCENT_MAP to plain ASCII."""
    return text.translate(_ACCENT_TABLE)


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit cost for insertion, deletion and substitution."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], previous[j], current[j - 1]) + 1)
        previous = current
    return previous[-1]


def match(answer: str, expected: str) -> MatchResult:
    """Compare an answer with the expected text.

    Case and surrounding whitespace never matter. When the texts only differ
    in accents the answer is an accent match. Otherwise the edit distance of
    the accent-folded texts is reported and a distance of one marks the
    answer as close.
    """
    normalized_answer = answer.strip().lower()
    normalized_expected = expected.strip().lower()

    if normalized_answer == normalized_expected:
        return MatchResult(
            is_exact=True, is_accent_match=True, is_fuzzy_match=True, is_close=False, distance=0
        )

    folded_answer = remove_accents(normalized_answer)
    folded_expected = remove_accents(normalized_expected)

    if folded_answer == folded_expected:
        return MatchResult(
            is_exact=False, is_accent_match=True, is_fuzzy_match=True, is_close=False, distance=0
        )

    distance = levenshtein(folded_answer, folded_expected)
    # distance is never 0 here; is_fuzzy_match stays part of the result for callers
    return MatchResult(
        is_exact=False,
        is_accent_match=False,
        is_fuzzy_match=distance == 0,
        is_close=distance == 1,
        distance=distance,
    )


def is_accepted(result: MatchResult) -> bool:
    """Whether a match result counts as a correct answer."""
    return result.is_exact or result.is_accent_match or result.is_fuzzy_match


def match_feedback(result: MatchResult, expected: str) -> Optional[str]:
    """Explain a match result to the learner, or None for an exact answer."""
    if result.is_exact:
        return None
    if result.is_accent_match:
        return "Watch the accents"
    if result.is_close:
        return f"Almost! The answer is: {expected}"
    return wrong_answer_feedback(expected)


def wrong_answer_feedback(expected: str) -> str:
    """Feedback for an answer graded as wrong."""
    return f"Wrong. The correct answer is: {expected}"
