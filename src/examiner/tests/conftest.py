"""Test configuration."""
import os
import tempfile
from pathlib import Path
from typing import Generator, List

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"
TEST_DIR = Path(tempfile.mkdtemp(prefix="examiner-test-"))
os.environ.setdefault("DATA_DIR", str(TEST_DIR / "data"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{TEST_DIR / 'examiner.db'}")

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from faker import Faker
from sqlalchemy.orm import Session

from examiner.config import ensure_directories
from examiner.models.base import Base, SessionLocal, engine, init_db
from examiner.models.models import WordPair, WordSet
from examiner.services.practice_service import PracticeService
from examiner.services.word_set_service import WordSetService

fake = Faker()


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database session on empty tables for each test."""
    init_db()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def word_set_service(db: Session) -> WordSetService:
    """Create a word set service instance."""
    return WordSetService(db)


@pytest.fixture
def practice_service(word_set_service: WordSetService) -> PracticeService:
    """Create a practice service instance."""
    return PracticeService(word_set_service)


def make_terms(count: int) -> List[tuple]:
    """Distinct (term_a, term_b) tuples."""
    words = fake.words(nb=count * 2, unique=True)
    return [(words[i], words[count + i]) for i in range(count)]


@pytest.fixture
def word_set(word_set_service: WordSetService) -> WordSet:
    """Create a set with five pairs."""
    return word_set_service.create_word_set(
        name=fake.sentence(nb_words=2),
        language_a="nl",
        language_b="en",
        pairs=make_terms(5),
    )


def make_pairs(count: int) -> List[WordPair]:
    """Unsaved pairs with ids, for tests that need no database."""
    return [
        WordPair(
            id=index + 1,
            set_id=1,
            term_a=term_a,
            term_b=term_b,
            ease_factor=2.5,
            interval=0,
            correct_count=0,
            incorrect_count=0,
        )
        for index, (term_a, term_b) in enumerate(make_terms(count))
    ]
