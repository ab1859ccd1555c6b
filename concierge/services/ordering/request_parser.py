"""Free-text order request parsing."""
import re
from typing import Iterable, List, Optional

from concierge.services.ordering.models import MAX_QUANTITY, ParsedRequestLine

STOP_WORDS = frozenset(
    {
        "a", "an", "the", "please", "for", "me", "with", "without", "and",
        "or", "to", "of", "from", "i", "want", "would", "like", "can", "get",
        "order", "add",
    }
)

NUMBER_WORDS = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "a couple of": 2,
    "a couple": 2,
    "a dozen": 12,
    "dozen": 12,
}

# Dish names that contain "and" but are a single item.
DEFAULT_PROTECTED_PHRASES = (
    "mac and cheese",
    "macaroni and cheese",
    "fish and chips",
    "chips and salsa",
    "chips and guacamole",
    "rice and beans",
    "chicken and waffles",
    "biscuits and gravy",
    "surf and turf",
    "salt and pepper",
    "peanut butter and jelly",
    "bread and butter",
    "cookies and cream",
    "lox and bagel",
)

_LEAD_IN_PATTERN = re.compile(
    r"^\s*(?:(?:i\s*want|i\s*would\s*like|i'?d\s*like|can\s*i\s*(?:get|have)|"
    r"could\s*i\s*(?:get|have)|let\s*me\s*(?:get|have)|i'?ll\s*(?:have|take)|"
    r"please)\b\s*)+",
    re.IGNORECASE,
)
_DIGIT_QUANTITY_PATTERN = re.compile(r"^\s*(\d+)(?:\s*x\b|\b)\s*", re.IGNORECASE)
_WORD_QUANTITY_PATTERN = re.compile(
    r"^\s*("
    + "|".join(sorted((re.escape(w) for w in NUMBER_WORDS), key=len, reverse=True))
    + r")\b\s*(?:x\b)?\s*",
    re.IGNORECASE,
)
_ARTICLE_PATTERN = re.compile(r"^(?:a|an|the)\s+", re.IGNORECASE)
_SEPARATOR_WORDS_PATTERN = re.compile(r"\b(?:then|plus)\b", re.IGNORECASE)
_SEGMENT_SPLIT_PATTERN = re.compile(r"[,;\n]+")
_AND_PATTERN = re.compile(r"\band\b", re.IGNORECASE)
_PROTECTED_AND = "\x00"


def normalize_text(text: str) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    text = text.lower()
    text = re.sub(r"[^a-z0-9\s]", " ", text)
    return re.sub(r"\s+", " ", text).strip()


def tokenize(normalized: str) -> List[str]:
    """Split normalized text into tokens, dropping stop words."""
    return [token for token in normalized.split(" ") if token and token not in STOP_WORDS]


def parse_order_request_lines(
    text: str, protected_phrases: Optional[Iterable[str]] = None
) -> List[ParsedRequestLine]:
    """
    Split a free-text order request into quantity-tagged lines.

    Args:
        text: Guest message, e.g. "I want 2 burgers, fries and a coke"
        protected_phrases: Extra dish names whose "and" must not split
            the line (typically catalog item names)

    Returns:
        Parsed lines in the order they appear in the text. Segments that
        normalize to nothing are dropped. Quantities are clamped to
        1..MAX_QUANTITY.
    """
    compact = re.sub(r"\s+", " ", text).strip()
    if not compact:
        return []

    compact = _protect_phrases(compact, protected_phrases)
    compact = _SEPARATOR_WORDS_PATTERN.sub(",", compact)

    segments = []
    for segment in _SEGMENT_SPLIT_PATTERN.split(compact):
        for part in _AND_PATTERN.split(segment):
            part = part.replace(_PROTECTED_AND, "and").strip()
            if part:
                segments.append(part)

    lines = []
    for segment in segments:
        line = _parse_segment(segment)
        if line is not None:
            lines.append(line)
    return lines


def _protect_phrases(text: str, protected_phrases: Optional[Iterable[str]]) -> str:
    phrases = set(DEFAULT_PROTECTED_PHRASES)
    if protected_phrases:
        phrases.update(normalize_text(phrase) for phrase in protected_phrases)

    for phrase in sorted(phrases, key=len, reverse=True):
        if " and " not in phrase:
            continue
        words = [re.escape(word) for word in phrase.split(" ")]
        pattern = re.compile(r"\b" + r"\W+".join(words) + r"\b", re.IGNORECASE)
        text = pattern.sub(
            lambda match: _AND_PATTERN.sub(_PROTECTED_AND, match.group(0)), text
        )
    return text


def _parse_segment(segment: str) -> Optional[ParsedRequestLine]:
    raw = segment.strip()
    remainder = _LEAD_IN_PATTERN.sub("", raw).strip()

    quantity = 1
    digit_match = _DIGIT_QUANTITY_PATTERN.match(remainder)
    word_match = _WORD_QUANTITY_PATTERN.match(remainder)
    if digit_match:
        quantity = int(digit_match.group(1))
        remainder = remainder[digit_match.end():]
    elif word_match:
        quantity = NUMBER_WORDS[re.sub(r"\s+", " ", word_match.group(1).lower())]
        remainder = remainder[word_match.end():]

    remainder = _ARTICLE_PATTERN.sub("", remainder.strip())
    normalized = normalize_text(remainder)
    if not normalized:
        return None

    return ParsedRequestLine(
        raw=raw,
        normalized=normalized,
        quantity=min(max(quantity, 1), MAX_QUANTITY),
        tokens=tokenize(normalized),
    )
