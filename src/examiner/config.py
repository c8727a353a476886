"""Configuration settings for the practice engine."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
MEDIA_DIR = DATA_DIR / "media"
PRONUNCIATIONS_DIR = MEDIA_DIR / "pronunciations"

# Spaced repetition defaults
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        MEDIA_DIR,
        PRONUNCIATIONS_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    media_dir: Path = MEDIA_DIR
    pronunciations_dir: Path = PRONUNCIATIONS_DIR


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///examiner.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class PracticeSettings:
    """Practice and scheduling settings."""
    default_ease_factor: float = DEFAULT_EASE_FACTOR
    min_ease_factor: float = MIN_EASE_FACTOR
    fast_answer_ms: int = int(os.getenv("FAST_ANSWER_MS", "3000"))
    medium_answer_ms: int = int(os.getenv("MEDIUM_ANSWER_MS", "5000"))
    choice_count: int = int(os.getenv("CHOICE_COUNT", "4"))
    default_mode: str = os.getenv("DEFAULT_MODE", "flashcard")
    default_direction: str = os.getenv("DEFAULT_DIRECTION", "a-to-b")


@dataclass
class OcrSettings:
    """Settings for turning recognized text into word pairs."""
    confidence_threshold: float = float(os.getenv("OCR_CONFIDENCE_THRESHOLD", "60"))


@dataclass
class GeneratorSettings:
    """Generative word pair suggestion settings."""
    api_key: str = os.getenv("GEMINI_API_KEY", "")
    model: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    base_url: str = os.getenv(
        "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
    )
    timeout: int = int(os.getenv("GEMINI_TIMEOUT", "30"))
    max_pairs: int = int(os.getenv("GENERATOR_MAX_PAIRS", "50"))


@dataclass
class MonitoringSettings:
    """Metrics exporter settings."""
    port: int = int(os.getenv("METRICS_PORT", "0"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_practice_settings() -> PracticeSettings:
    """Get practice settings."""
    return PracticeSettings()


def get_ocr_settings() -> OcrSettings:
    """Get OCR settings."""
    return OcrSettings()


def get_generator_settings() -> GeneratorSettings:
    """Get generator settings."""
    return GeneratorSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    practice: PracticeSettings = field(default_factory=get_practice_settings)
    ocr: OcrSettings = field(default_factory=get_ocr_settings)
    generator: GeneratorSettings = field(default_factory=get_generator_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.practice.fast_answer_ms >= self.practice.medium_answer_ms:
            raise ValueError("FAST_ANSWER_MS must be lower than MEDIUM_ANSWER_MS")

        if self.practice.choice_count < 2:
            raise ValueError("CHOICE_COUNT must be at least 2")

        if self.practice.default_direction not in ("a-to-b", "b-to-a", "random"):
            raise ValueError("DEFAULT_DIRECTION must be a-to-b, b-to-a or random")

        if self.ocr.confidence_threshold < 0 or self.ocr.confidence_threshold > 100:
            raise ValueError("OCR_CONFIDENCE_THRESHOLD must be between 0 and 100")

        if self.generator.max_pairs < 1:
            raise ValueError("GENERATOR_MAX_PAIRS must be positive")


# Create global settings instance
settings = Settings()
settings.validate()
