"""Turn lines of recognized or pasted text into word pairs."""
import re
from typing import Iterable, List, Optional, Tuple

from examiner.config import settings
from examiner.models.practice_models import OcrLine, ParsedWordPair

DASH_PATTERN = re.compile(r"^(.+?)\s*[-–—]\s*(.+)$")
COLON_PATTERN = re.compile(r"^(.+?)\s*:\s*(.+)$")
MULTI_SPACE_PATTERN = re.compile(r"^(.+?)\s{3,}(.+)$")


def parse_line(text: str) -> Optional[Tuple[str, str]]:
    """Split one line into (term_a, term_b), or None if it holds no pair.

    Separators are tried in order: tab, dash, colon, three or more spaces.
    Without a separator a line of four or more words is cut in half and a
    line of exactly two words becomes a pair.
    """
    trimmed = text.strip()
    if not trimmed:
        return None

    if "\t" in trimmed:
        first, *rest = trimmed.split("\t")
        return first.strip(), " ".join(rest).strip()

    for pattern in (DASH_PATTERN, COLON_PATTERN, MULTI_SPACE_PATTERN):
        found = pattern.match(trimmed)
        if found:
            return found.group(1).strip(), found.group(2).strip()

    words = trimmed.split()
    if len(words) >= 4:
        middle = (len(words) + 1) // 2
        return " ".join(words[:middle]), " ".join(words[middle:])
    if len(words) == 2:
        return words[0], words[1]
    return None


def parse_ocr_lines(lines: Iterable[OcrLine]) -> List[ParsedWordPair]:
    """Parse every line, keeping its index and confidence. Unparseable lines are dropped."""
    pairs = []
    for index, line in enumerate(lines):
        parsed = parse_line(line.text)
        if parsed:
            pairs.append(
                ParsedWordPair(
                    term_a=parsed[0],
                    term_b=parsed[1],
                    confidence=line.confidence,
                    line=index,
                )
            )
    return pairs


def parse_text(text: str, confidence: float = 100) -> List[ParsedWordPair]:
    """Parse a pasted word list where every line is trusted equally."""
    return parse_ocr_lines(OcrLine(text=line, confidence=confidence) for line in text.splitlines())


def validate_parsed_pairs(
    pairs: Iterable[ParsedWordPair], threshold: Optional[float] = None
) -> Tuple[List[ParsedWordPair], List[ParsedWordPair]]:
    """Split pairs into (valid, low_confidence); pairs missing a side are dropped."""
    if threshold is None:
        threshold = settings.ocr.confidence_threshold
    valid = []
    low_confidence = []
    for pair in pairs:
        if not pair.term_a or not pair.term_b:
            continue
        if pair.confidence < threshold:
            low_confidence.append(pair)
        else:
            valid.append(pair)
    return valid, low_confidence
