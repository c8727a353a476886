"""Languages word sets can be made in."""
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Language:
    """A supported language with the codes used by OCR and speech."""
    code: str  # ISO 639-1, stored on word sets and used for text-to-speech
    name: str
    ocr_code: str  # Tesseract traineddata name
    speech_code: str  # BCP 47 tag for speech recognition


LANGUAGES: List[Language] = [
    Language("nl", "Dutch", "nld", "nl-NL"),
    Language("en", "English", "eng", "en-GB"),
    Language("de", "German", "deu", "de-DE"),
    Language("fr", "French", "fra", "fr-FR"),
    Language("es", "Spanish", "spa", "es-ES"),
    Language("it", "Italian", "ita", "it-IT"),
    Language("pt", "Portuguese", "por", "pt-PT"),
    Language("la", "Latin", "lat", "la"),
]


def get_language_by_code(code: str) -> Optional[Language]:
    return next((lang for lang in LANGUAGES if lang.code == code), None)


def get_language_by_ocr_code(code: str) -> Optional[Language]:
    return next((lang for lang in LANGUAGES if lang.ocr_code == code), None)


def get_language_by_speech_code(code: str) -> Optional[Language]:
    return next((lang for lang in LANGUAGES if lang.speech_code == code), None)
