"""Exceptions raised by the practice engine and its collaborators."""


class ExaminerError(Exception):
    """Base class for all application errors."""


class NotFoundError(ExaminerError, ValueError):
    """A word set, word pair or session id does not exist."""


class PersistenceError(ExaminerError):
    """Saving practice progress to the database failed."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


class GenerationError(ExaminerError):
    """The word pair generator could not produce a usable result."""


class OcrError(ExaminerError):
    """An OCR engine could not be started or failed to read an image."""


class SpeechRecognitionError(ExaminerError):
    """Listening for a spoken answer failed."""
