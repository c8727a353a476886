"""Tests for fuzzy answer matching."""
import pytest
from faker import Faker

from examiner.services.fuzzy_match import (
    is_accepted,
    levenshtein,
    match,
    match_feedback,
    remove_accents,
    wrong_answer_feedback,
)

fake = Faker()


@pytest.mark.parametrize("text", ["kat", "de hond", "Über", "", "  spaced  "])
def test_same_text_is_exact(text: str) -> None:
    """Test that a string always matches itself exactly."""
    result = match(text, text)
    assert result.is_exact is True
    assert result.distance == 0


def test_case_and_whitespace_are_ignored() -> None:
    """Test that case and surrounding whitespace do not matter."""
    word = fake.word()
    assert match(word.upper(), word).is_exact is True
    assert match(f"  {word}\t", word).is_exact is True


def test_accent_match() -> None:
    """Test that a missing accent is an accent match, not an exact one."""
    result = match("cafe", "café")
    assert result.is_exact is False
    assert result.is_accent_match is True
    assert result.is_fuzzy_match is True
    assert result.is_close is False
    assert result.distance == 0


def test_accent_folding_table() -> None:
    """Test the special folds of the accent table."""
    assert remove_accents("straße") == "strasse"
    assert remove_accents("cœur") == "coeur"
    assert remove_accents("æble") == "aeble"
    assert remove_accents("niño façade") == "nino facade"
    assert match("strasse", "straße").is_accent_match is True


def test_one_edit_is_close() -> None:
    """Test that a single typo is reported as close."""
    result = match("katt", "kat")
    assert result.is_close is True
    assert result.distance == 1
    assert result.is_exact is False
    assert result.is_accent_match is False
    assert result.is_fuzzy_match is False


def test_distance_is_measured_without_accents() -> None:
    """Test that accents do not add to the edit distance."""
    result = match("cafés", "café")
    assert result.distance == 1
    assert result.is_close is True


def test_wrong_answer() -> None:
    """Test an answer that is far off."""
    result = match("hond", "kat")
    assert result.is_close is False
    assert result.distance == 4
    assert is_accepted(result) is False


def test_levenshtein() -> None:
    """Test the classic edit distance examples."""
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("sitting", "kitten") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("abc", "") == 3
    assert levenshtein("flaw", "lawn") == 2
    assert levenshtein("same", "same") == 0


def test_is_accepted() -> None:
    """Test which results count as correct."""
    assert is_accepted(match("kat", "kat")) is True
    assert is_accepted(match("cafe", "café")) is True
    assert is_accepted(match("katt", "kat")) is False


def test_feedback_messages() -> None:
    """Test that each outcome has its own feedback, checked in priority order."""
    assert match_feedback(match("kat", "kat"), "kat") is None
    assert match_feedback(match("cafe", "café"), "café") == "Watch the accents"
    assert match_feedback(match("katt", "kat"), "kat") == "Almost! The answer is: kat"
    assert match_feedback(match("hond", "kat"), "kat") == "Wrong. The correct answer is: kat"
    assert wrong_answer_feedback("kat") == match_feedback(match("hond", "kat"), "kat")


if __name__ == "__main__":
    pytest.main([__file__])
