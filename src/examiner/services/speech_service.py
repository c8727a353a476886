"""Text-to-speech output and spoken answers."""
import hashlib
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from gtts import gTTS
from gtts.lang import tts_langs
from gtts.tts import gTTSError

from examiner.config import settings
from examiner.errors import SpeechRecognitionError
from examiner.languages import get_language_by_code

logger = logging.getLogger(__name__)


class SpeechRecognizer(ABC):
    """A speech-to-text backend that listens for one utterance."""

    @abstractmethod
    def is_supported(self) -> bool:
        """Whether listening is available on this system."""
        raise NotImplementedError("Subclasses must implement this method")

    @abstractmethod
    def listen_once(self, speech_code: str) -> str:
        """Listen for one utterance and return the transcript.

        Raises SpeechRecognitionError when nothing could be recognized.
        """
        raise NotImplementedError("Subclasses must implement this method")


class SpeechService:
    """Speaks terms aloud and listens for spoken answers."""

    def __init__(self, recognizer: Optional[SpeechRecognizer] = None, output_dir: Optional[Path] = None):
        self.recognizer = recognizer
        self.output_dir = Path(output_dir or settings.paths.pronunciations_dir)
        self.current_file: Optional[str] = None

    @staticmethod
    def is_supported(language_code: str) -> bool:
        """Whether text-to-speech can speak the given language."""
        return language_code in tts_langs()

    def speak(self, text: str, language_code: str) -> Optional[str]:
        """Render text as speech and return the audio file path.

        Files are reused when the same text was spoken before. Returns None if
        the language is unsupported or rendering failed.
        """
        if not text.strip() or not self.is_supported(language_code):
            return None
        self.cancel()
        path = self.output_dir / self._audio_filename(text, language_code)
        if not path.exists():
            try:
                self.output_dir.mkdir(parents=True, exist_ok=True)
                gTTS(text=text, lang=language_code).save(str(path))
                logger.info(f"Pronunciation generated for {text!r}: {path}")
            except (gTTSError, OSError) as e:
                logger.error(f"Error generating pronunciation for {text!r}: {e}")
                return None
        self.current_file = str(path)
        return self.current_file

    def cancel(self) -> None:
        """Stop offering the audio produced by the last speak call."""
        self.current_file = None

    def listening_supported(self) -> bool:
        return self.recognizer is not None and self.recognizer.is_supported()

    def listen_for_answer(self, language_code: str) -> str:
        """Listen for a spoken answer in the given language."""
        if not self.listening_supported():
            raise SpeechRecognitionError("Speech recognition is not supported")
        language = get_language_by_code(language_code)
        speech_code = language.speech_code if language else language_code
        transcript = self.recognizer.listen_once(speech_code)
        logger.debug(f"Heard {transcript!r} ({speech_code})")
        return transcript.strip()

    @staticmethod
    def _audio_filename(text: str, language_code: str) -> str:
        """Cache file name: a readable prefix plus a digest of the exact text."""
        readable = re.sub(r"\W", "_", text.lower())[:40]
        digest = hashlib.sha1(f"{language_code}:{text}".encode("utf-8")).hexdigest()[:12]
        return f"{language_code}_{readable}_{digest}.mp3"
