"""Turn dictated or typed text into (name, mark) pairs.

Speech-to-text output is noisy, so several independent patterns are run over
the same text and their matches are merged. Everything here is pure: the
same text always yields the same result, and no state survives a call.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Pattern, Sequence

from ..common.validators import is_valid_mark, parse_mark_digits
from ..core.constants import LOW_CONFIDENCE_MARKER

FILLER_VERBS = frozenset(
    ["got", "scored", "has", "obtained", "received", "marks", "mark", "points", "point", "have", "get", "gets"]
)
FILLER_WORDS = frozenset(["the", "a", "an", "and", "or", "but", "is", "was", "are", "were"])
MAX_NAME_WORDS = 2


@dataclass(frozen=True)
class MarkEntry:
    name: str
    mark: int

    @property
    def needs_correction(self) -> bool:
        return self.name.endswith(LOW_CONFIDENCE_MARKER)

    def to_dict(self) -> dict:
        return {"name": self.name, "mark": self.mark}


@dataclass(frozen=True)
class PatternSpec:
    """One extraction pattern and which capture group plays which role."""

    regex: Pattern[str]
    name_group: int = 1
    mark_group: int = 2
    low_confidence: bool = False


def _p(source: str) -> Pattern[str]:
    return re.compile(source, re.IGNORECASE)


PATTERNS: tuple[PatternSpec, ...] = (
    # "Sarah got 85 marks"
    PatternSpec(_p(r"\b([A-Z][a-z]+)\s+(?:got|scored|has|obtained|received|have|get|gets)\s+(\d+)\s*(?:marks?)?")),
    # "Ravi 72"
    PatternSpec(_p(r"\b([A-Z][a-z]{2,})\s+(\d{1,3})\b")),
    # "M72": a clipped capture, the name needs a human to fill it in
    PatternSpec(_p(r"\b([A-Z])(\d{1,3})\b"), low_confidence=True),
    # "Mary Jane marks 64"
    PatternSpec(_p(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)\s+marks?\s+(\d+)")),
    # "90 marks for Keerthy"
    PatternSpec(_p(r"(\d+)\s+marks?\s+(?:for|to)\s+\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)"), name_group=2, mark_group=1),
    # "John: 70", "Mary - 90", "Ravi, 55"
    PatternSpec(_p(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)\s*[:,\s-]\s*(\d+)")),
)

_CAPITALIZED_RUN = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\b")
_INTEGER = re.compile(r"\d+")


@dataclass(frozen=True)
class ExtractionResult:
    entries: tuple[MarkEntry, ...] = ()
    students: tuple[str, ...] = field(default=())
    marks: tuple[int, ...] = field(default=())

    def to_dict(self) -> dict:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "students": list(self.students),
            "marks": list(self.marks),
        }


def clean_name(raw: str) -> str:
    """Drop filler words, keep at most two words, never end on a filler verb."""
    kept: list[str] = []
    for word in raw.split():
        lower = word.lower()
        if lower not in FILLER_VERBS and lower not in FILLER_WORDS:
            kept.append(word)
        if len(kept) >= MAX_NAME_WORDS:
            break

    if kept and kept[-1].lower() in FILLER_VERBS:
        kept.pop()
    return " ".join(kept).strip()


def capitalize_words(name: str) -> str:
    return " ".join(w[:1].upper() + w[1:].lower() for w in name.split(" "))


def normalize_name(name: str) -> str:
    return name.strip().lower()


def _entry_from_match(spec: PatternSpec, match: re.Match) -> Optional[MarkEntry]:
    name = match.group(spec.name_group).strip()
    mark = parse_mark_digits(match.group(spec.mark_group))
    if mark is None or not is_valid_mark(mark) or not name:
        return None

    if spec.low_confidence and len(name) == 1:
        return MarkEntry(name=name + LOW_CONFIDENCE_MARKER, mark=mark)

    name = clean_name(name)
    if not name:
        return None
    return MarkEntry(name=capitalize_words(name), mark=mark)


def extract_entries(text: str, patterns: Sequence[PatternSpec] = PATTERNS) -> tuple[MarkEntry, ...]:
    found: dict[str, MarkEntry] = {}
    for spec in patterns:
        for match in spec.regex.finditer(text):
            entry = _entry_from_match(spec, match)
            if entry is None:
                continue
            # first sighting fixes the position, a later one replaces the value
            found[f"{normalize_name(entry.name)}_{entry.mark}"] = entry
    return tuple(found.values())


def extract_student_names(text: str) -> tuple[str, ...]:
    return tuple(_CAPITALIZED_RUN.findall(text))


def extract_marks(text: str) -> tuple[int, ...]:
    values = (parse_mark_digits(s) for s in _INTEGER.findall(text))
    return tuple(n for n in values if n is not None and is_valid_mark(n))


def extract(text: Optional[str]) -> ExtractionResult:
    text = text or ""
    return ExtractionResult(
        entries=extract_entries(text),
        students=extract_student_names(text),
        marks=extract_marks(text),
    )


def pick_best_transcript(alternatives: Iterable[Optional[str]]) -> str:
    """The recognition hypothesis that yields the most entries; earliest wins ties."""
    best = ""
    best_score = -1
    for alt in alternatives:
        alt = alt or ""
        score = len(extract_entries(alt))
        if score > best_score:
            best, best_score = alt, score
    return best
