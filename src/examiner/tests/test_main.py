"""Tests for the command line interface."""
from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy.orm import Session

from examiner.__main__ import main
from examiner.models.models import PracticeSession, WordSet


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("examiner.__main__.setup_logging"):
        yield


@pytest.fixture
def word_list(tmp_path: Path) -> Path:
    path = tmp_path / "animals.txt"
    path.write_text("hond - dog\nkat - cat\n\nmuis\tmouse\nlosse regel met vijf woorden\n", encoding="utf-8")
    return path


def answer_with(monkeypatch: pytest.MonkeyPatch, answers) -> None:
    replies = iter(answers)

    def fake_input(prompt: str = "") -> str:
        try:
            return next(replies)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)


def test_import_and_list(db: Session, word_list: Path, capsys: pytest.CaptureFixture) -> None:
    """Test importing a word list file and listing sets."""
    assert main(["import", "Animals", str(word_list), "--lang-a", "nl", "--lang-b", "en"]) == 0
    assert "Created set" in capsys.readouterr().out

    word_set = db.query(WordSet).one()
    assert [(p.term_a, p.term_b) for p in word_set.pairs][:3] == [
        ("hond", "dog"),
        ("kat", "cat"),
        ("muis", "mouse"),
    ]
    assert len(word_set.pairs) == 4

    assert main(["sets"]) == 0
    out = capsys.readouterr().out
    assert "Animals" in out
    assert "Dutch - English" in out
    assert "4 pairs, 4 due" in out


def test_flashcard_practice_stores_session(
    db: Session, word_list: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """Test a full flashcard session from the terminal."""
    main(["import", "Animals", str(word_list), "--lang-a", "nl", "--lang-b", "en"])
    set_id = db.query(WordSet).one().id

    answer_with(monkeypatch, ["", "y"] * 4)
    assert main(["practice", str(set_id), "--mode", "flashcard"]) == 0
    assert "Done! 4 of 4 correct (100%)" in capsys.readouterr().out
    assert db.query(PracticeSession).count() == 1

    assert main(["history", str(set_id)]) == 0
    assert "flashcard" in capsys.readouterr().out

    assert main(["due", str(set_id)]) == 0
    assert capsys.readouterr().out == ""

    assert main(["reset", str(set_id)]) == 0
    assert "Reset 4 pairs" in capsys.readouterr().out


def test_interrupted_practice_is_not_saved(
    db: Session, word_list: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that ending input mid-session discards the run."""
    main(["import", "Animals", str(word_list), "--lang-a", "nl", "--lang-b", "en"])
    set_id = db.query(WordSet).one().id

    answer_with(monkeypatch, ["", "y"])
    assert main(["practice", str(set_id), "--mode", "flashcard"]) == 130
    assert db.query(PracticeSession).count() == 0


def test_unknown_set(db: Session, capsys: pytest.CaptureFixture) -> None:
    """Test that commands on a missing set fail cleanly."""
    assert main(["reset", "42"]) == 1
    assert "not found" in capsys.readouterr().err


if __name__ == "__main__":
    pytest.main([__file__])
