"""Word pair suggestions from the Gemini generative language API."""
import json
import logging
from typing import Dict, List, Optional

import requests

from examiner.config import settings
from examiner.errors import GenerationError
from examiner.models.practice_models import Difficulty
from examiner.monitoring import pairs_generated

logger = logging.getLogger(__name__)

DIFFICULTY_LABELS = {
    Difficulty.BEGINNER: "beginner (simple, frequently used words)",
    Difficulty.INTERMEDIATE: "intermediate (school level, everyday vocabulary)",
    Difficulty.ADVANCED: "advanced (complex, less common words)",
}

PROMPT = """Generate exactly {count} word pairs on the theme "{theme}".
Language A: {language_a}
Language B: {language_b}
Difficulty: {difficulty}

Return ONLY a JSON array of objects with "termA" (in {language_a}) and "termB" (in {language_b}).
No explanation, no numbering, only the JSON array.
Example: [{{"termA":"hond","termB":"dog"}},{{"termA":"kat","termB":"cat"}}]"""


class WordPairGenerator:
    """Client asking a generative model for themed word pairs."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.generator.api_key
        self.model = model or settings.generator.model
        self.base_url = (base_url or settings.generator.base_url).rstrip("/")
        self.timeout = timeout or settings.generator.timeout
        self.session = session or requests.Session()

    def build_prompt(
        self, theme: str, language_a: str, language_b: str, count: int, difficulty: Difficulty
    ) -> str:
        return PROMPT.format(
            count=count,
            theme=theme,
            language_a=language_a,
            language_b=language_b,
            difficulty=DIFFICULTY_LABELS[difficulty],
        )

    def generate(
        self,
        theme: str,
        language_a: str,
        language_b: str,
        count: int,
        difficulty: Difficulty = Difficulty.BEGINNER,
    ) -> List[Dict[str, str]]:
        """Ask for `count` pairs; any failure raises GenerationError for the whole request."""
        if not self.api_key:
            raise GenerationError("No API key configured for the word pair generator")
        if count < 1 or count > settings.generator.max_pairs:
            raise GenerationError(f"Count must be between 1 and {settings.generator.max_pairs}")

        url = f"{self.base_url}/models/{self.model}:generateContent"
        body = {
            "contents": [{"parts": [{"text": self.build_prompt(theme, language_a, language_b, count, difficulty)}]}],
            "generationConfig": {"response_mime_type": "application/json"},
        }
        logger.info(f"Requesting {count} {difficulty.value} pairs on {theme!r}")
        try:
            response = self.session.post(
                url, params={"key": self.api_key}, json=body, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Generator request failed: {e}")
            raise GenerationError(f"Generator request failed: {e}") from e

        if not response.ok:
            raise GenerationError(self._error_message(response))

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError("Generator returned invalid JSON") from e

        if not isinstance(data, dict):
            raise GenerationError("Generator returned an unexpected response")
        if data.get("error"):
            raise GenerationError(data["error"].get("message", "Generator returned an error"))

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            text = None
        if not text:
            raise GenerationError("Generator returned no result")

        try:
            parsed = json.loads(text)
        except ValueError as e:
            raise GenerationError("Generator result is not valid JSON") from e
        if not isinstance(parsed, list):
            raise GenerationError("Generator result has an unexpected format")

        pairs = []
        for item in parsed:
            if not isinstance(item, dict):
                continue
            term_a = str(item.get("termA") or "").strip()
            term_b = str(item.get("termB") or "").strip()
            if term_a and term_b:
                pairs.append({"term_a": term_a, "term_b": term_b})

        pairs_generated.inc(len(pairs))
        logger.info(f"Generator returned {len(pairs)} usable pairs")
        return pairs

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            message = response.json().get("error", {}).get("message")
        except (ValueError, AttributeError):
            message = None
        return message or f"Generator API error ({response.status_code})"
