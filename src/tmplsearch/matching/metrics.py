from __future__ import annotations

import enum
from typing import Union

import cv2
import numpy as np

from ..errors import InvalidMetricConfiguration

# float32 surfaces land a few ulps short of exact scores such as 1.0
SCORE_TOLERANCE = 1e-5


class Polarity(enum.Enum):
    """
    Direction in which a metric improves.
    """

    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"

    @property
    def worst_value(self) -> float:
        """Value that can never be selected as the best score."""
        limit = float(np.finfo(np.float32).max)
        return limit if self is Polarity.MINIMIZE else -limit

    def accepts(self, score: float, threshold: float) -> bool:
        if self is Polarity.MINIMIZE:
            return score <= threshold + SCORE_TOLERANCE
        return score >= threshold - SCORE_TOLERANCE

    def is_better(self, score: float, other: float) -> bool:
        if self is Polarity.MINIMIZE:
            return score < other
        return score > other


class MatchingMethod(enum.Enum):
    """
    Similarity metrics understood by the engine, backed by cv2.matchTemplate.
    """

    SQDIFF = (cv2.TM_SQDIFF, Polarity.MINIMIZE)
    SQDIFF_NORMED = (cv2.TM_SQDIFF_NORMED, Polarity.MINIMIZE)
    CCORR = (cv2.TM_CCORR, Polarity.MAXIMIZE)
    CCORR_NORMED = (cv2.TM_CCORR_NORMED, Polarity.MAXIMIZE)
    CCOEFF = (cv2.TM_CCOEFF, Polarity.MAXIMIZE)
    CCOEFF_NORMED = (cv2.TM_CCOEFF_NORMED, Polarity.MAXIMIZE)

    def __init__(self, cv_method: int, polarity: Polarity) -> None:
        self.cv_method = cv_method
        self.polarity = polarity


# Readable aliases for the names the metrics usually go by.
_ALIASES = {
    "squared_difference": MatchingMethod.SQDIFF,
    "normalized_squared_difference": MatchingMethod.SQDIFF_NORMED,
    "cross_correlation": MatchingMethod.CCORR,
    "normalized_cross_correlation": MatchingMethod.CCORR_NORMED,
    "correlation_coefficient": MatchingMethod.CCOEFF,
    "normalized_correlation_coefficient": MatchingMethod.CCOEFF_NORMED,
}

MethodLike = Union[MatchingMethod, str, int]


def resolve_method(value: MethodLike) -> MatchingMethod:
    """
    Turn a method name, OpenCV constant or enum member into a MatchingMethod.

    Raises InvalidMetricConfiguration for anything unrecognized.
    """
    if isinstance(value, MatchingMethod):
        return value
    if isinstance(value, str):
        key = value.strip().replace("-", "_")
        try:
            return MatchingMethod[key.upper()]
        except KeyError:
            pass
        method = _ALIASES.get(key.lower())
        if method is not None:
            return method
        raise InvalidMetricConfiguration(f"unknown matching method: {value!r}")
    # bool is an int subclass but never a valid OpenCV constant
    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        for method in MatchingMethod:
            if method.cv_method == int(value):
                return method
    raise InvalidMetricConfiguration(f"unknown matching method: {value!r}")


__all__ = ["SCORE_TOLERANCE", "MatchingMethod", "MethodLike", "Polarity", "resolve_method"]
