"""Pool of OCR engines, one per recognition language."""
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Tuple

from examiner.errors import OcrError
from examiner.models.practice_models import OcrLine, OcrResult, ParsedWordPair
from examiner.services.ocr_parser import parse_ocr_lines, validate_parsed_pairs

logger = logging.getLogger(__name__)


class OcrEngine(ABC):
    """An OCR backend loaded for a single language."""

    @abstractmethod
    def recognize(self, image: Any) -> OcrResult:
        """Read all text lines from an image."""
        raise NotImplementedError("Subclasses must implement this method")

    def close(self) -> None:
        """Free the resources held by the engine."""


class OcrWorkerPool:
    """Keeps one engine per OCR language code until released."""

    def __init__(self, engine_factory: Callable[[str], OcrEngine]):
        self.engine_factory = engine_factory
        self._engines: Dict[str, OcrEngine] = {}

    def __len__(self) -> int:
        return len(self._engines)

    def acquire(self, language_code: str) -> OcrEngine:
        """Get the engine for a language, starting it on first use."""
        engine = self._engines.get(language_code)
        if engine is not None:
            return engine
        try:
            engine = self.engine_factory(language_code)
        except Exception as e:
            raise OcrError(f"Could not start OCR engine for {language_code}: {e}") from e
        logger.info(f"Started OCR engine for {language_code}")
        self._engines[language_code] = engine
        return engine

    def release_all(self) -> None:
        """Close and forget every engine."""
        engines = list(self._engines.items())
        self._engines.clear()
        for language_code, engine in engines:
            try:
                engine.close()
            except Exception as e:
                logger.warning(f"Closing OCR engine for {language_code} failed: {e}")
        logger.info(f"Released {len(engines)} OCR engine(s)")

    def recognize(self, image: Any, language_code: str) -> OcrResult:
        """Recognize an image with the engine for the given language."""
        engine = self.acquire(language_code)
        try:
            result = engine.recognize(image)
        except Exception as e:
            raise OcrError(f"Recognition failed: {e}") from e
        lines = [
            OcrLine(text=line.text.strip(), confidence=line.confidence, words=line.words)
            for line in result.lines
        ]
        return OcrResult(text=result.text, confidence=result.confidence, lines=lines)

    def extract_word_pairs(
        self, image: Any, language_code: str
    ) -> Tuple[List[ParsedWordPair], List[ParsedWordPair]]:
        """Recognize an image and return (valid, low_confidence) word pairs."""
        result = self.recognize(image, language_code)
        valid, low_confidence = validate_parsed_pairs(parse_ocr_lines(result.lines))
        logger.info(
            f"Read {len(result.lines)} lines: {len(valid)} pairs, "
            f"{len(low_confidence)} with low confidence"
        )
        return valid, low_confidence
