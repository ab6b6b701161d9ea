from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from ..core.constants import DEFAULT_FACE_MATCH_THRESHOLD, FACE_DESCRIPTOR_LENGTH


def _as_vector(values: Sequence[Optional[float]]) -> np.ndarray:
    """Fixed 128-slot float vector; missing or null components become 0."""
    vec = np.zeros(FACE_DESCRIPTOR_LENGTH, dtype=np.float64)
    for i, v in enumerate(list(values)[:FACE_DESCRIPTOR_LENGTH]):
        if v is not None:
            vec[i] = float(v)
    return vec


def euclidean_distance(a: Sequence[Optional[float]], b: Sequence[Optional[float]]) -> float:
    return float(np.linalg.norm(_as_vector(a) - _as_vector(b)))


def is_match(distance: float, threshold: float = DEFAULT_FACE_MATCH_THRESHOLD) -> bool:
    return distance <= threshold


@dataclass(frozen=True)
class FaceMatchResult:
    distance: float
    threshold: float

    @property
    def matched(self) -> bool:
        return is_match(self.distance, self.threshold)


class FaceMatcher:
    def __init__(self, threshold: float = DEFAULT_FACE_MATCH_THRESHOLD):
        self.threshold = float(threshold)

    def compare(self, probe: Sequence[float], reference: Sequence[float]) -> FaceMatchResult:
        return FaceMatchResult(distance=euclidean_distance(probe, reference), threshold=self.threshold)
