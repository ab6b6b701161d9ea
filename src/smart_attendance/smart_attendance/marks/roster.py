from __future__ import annotations

from typing import Optional, Sequence

from rapidfuzz.distance import Levenshtein

from ..core.constants import ROSTER_MAX_DISTANCE


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit insert/delete/substitute costs."""
    return Levenshtein.distance(a, b)


def correct_to_roster(
    candidate: Optional[str],
    roster: Sequence[str],
    *,
    max_distance: int = ROSTER_MAX_DISTANCE,
) -> Optional[str]:
    """Snap ``candidate`` to the closest roster name, or return it unchanged.

    Comparison is case-insensitive. The roster is scanned left to right and the
    first name at the minimum distance wins.
    """
    name = (candidate or "").strip()
    if not name:
        return candidate

    best: Optional[str] = None
    best_distance: Optional[int] = None
    needle = name.lower()
    for real in roster:
        d = edit_distance(needle, real.lower())
        if best_distance is None or d < best_distance:
            best, best_distance = real, d

    if best is not None and best_distance is not None and best_distance <= max_distance:
        return best
    return name


class RosterCorrector:
    def __init__(self, roster: Sequence[str], *, max_distance: int = ROSTER_MAX_DISTANCE):
        self.roster = tuple(roster)
        self.max_distance = max_distance

    def correct(self, candidate: Optional[str]) -> Optional[str]:
        return correct_to_roster(candidate, self.roster, max_distance=self.max_distance)
