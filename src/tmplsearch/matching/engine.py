from __future__ import annotations

import contextvars
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

import numpy as np

from .metrics import MatchingMethod, MethodLike, Polarity, resolve_method
from .surface import (
    SuppressionStrategy,
    compute_score_surface,
    locate_extremum,
    suppress_region,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MatchPoint:
    """
    A single match: pixel coordinate plus the metric's score at that spot.
    """

    x: int
    y: int
    score: float

    def to_point(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def offset(self, dx: int, dy: int) -> MatchPoint:
        return MatchPoint(x=self.x + dx, y=self.y + dy, score=self.score)


@dataclass(frozen=True, slots=True)
class MatchConfig:
    """
    Settings that shape a search. Instances are immutable and safe to share.
    """

    method: MatchingMethod = MatchingMethod.CCOEFF_NORMED
    suppression: SuppressionStrategy = SuppressionStrategy.RECTANGLE
    suppression_radius: Optional[Tuple[int, int]] = field(default=None)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", resolve_method(self.method))
        if not isinstance(self.suppression, SuppressionStrategy):
            try:
                object.__setattr__(self, "suppression", SuppressionStrategy(self.suppression))
            except ValueError as exc:
                raise ValueError(f"unknown suppression strategy: {self.suppression!r}") from exc
        if self.suppression_radius is not None:
            radius_x, radius_y = self.suppression_radius
            if radius_x < 0 or radius_y < 0:
                raise ValueError("suppression_radius must be >= 0 on both axes")

    @property
    def polarity(self) -> Polarity:
        return self.method.polarity


@dataclass(slots=True)
class TemplateMatcher:
    """
    Finds a template inside a larger image with cv2.matchTemplate.

    The matcher holds only its configuration; every call works on a fresh
    score surface, so one matcher may serve concurrent callers.
    """

    config: MatchConfig = field(default_factory=MatchConfig)

    def score_surface(self, template: np.ndarray, image: np.ndarray) -> np.ndarray:
        return compute_score_surface(template, image, self.config.method)

    def find_best(self, template: np.ndarray, image: np.ndarray, return_center: bool = True) -> MatchPoint:
        """
        Locate the single best placement of ``template`` inside ``image``.

        With ``return_center`` the coordinate names the template centre
        (top-left plus half the template size, rounded down) instead of its
        top-left corner.
        """
        surface = self.score_surface(template, image)
        (x, y), score = locate_extremum(surface, self.config.polarity)
        match = MatchPoint(x=x, y=y, score=score)
        if return_center:
            match = match.offset(*_center_offset(template))
        return match

    def find_all(
        self,
        template: np.ndarray,
        image: np.ndarray,
        max_count: int,
        threshold: float,
        return_center: bool = True,
    ) -> List[MatchPoint]:
        """
        Collect up to ``max_count`` matches, best first.

        A candidate is accepted when its score is at least ``threshold``
        (at most, for squared-difference metrics). The search stops at the
        first rejected candidate.
        """
        if max_count < 0:
            raise ValueError("max_count must be >= 0")

        matches: List[MatchPoint] = []
        if max_count == 0:
            return matches

        surface = self.score_surface(template, image)
        polarity = self.config.polarity
        template_size = (int(template.shape[1]), int(template.shape[0]))
        center = _center_offset(template) if return_center else (0, 0)

        remaining = max_count
        while remaining > 0:
            (x, y), score = locate_extremum(surface, polarity)
            if not polarity.is_better(score, polarity.worst_value):
                logger.debug("surface exhausted after %d matches", len(matches))
                break
            if not polarity.accepts(score, threshold):
                logger.debug("candidate (%d, %d) score=%.4f rejected by threshold %.4f", x, y, score, threshold)
                break

            suppress_region(
                surface,
                (x, y),
                polarity,
                template_size,
                strategy=self.config.suppression,
                radius=self.config.suppression_radius,
            )
            matches.append(MatchPoint(x=x + center[0], y=y + center[1], score=score))
            remaining -= 1

        logger.debug("found %d matches (max_count=%d, threshold=%.4f)", len(matches), max_count, threshold)
        return matches


def _center_offset(template: np.ndarray) -> Tuple[int, int]:
    height, width = template.shape[:2]
    return width // 2, height // 2


_current_config: contextvars.ContextVar[MatchConfig] = contextvars.ContextVar(
    "tmplsearch_match_config", default=MatchConfig()
)


def configure_metric(method: MethodLike) -> MatchConfig:
    """
    Select the metric used by the module-level find functions.

    The setting is scoped to the current context: other threads and asyncio
    tasks keep their own. Unknown methods raise InvalidMetricConfiguration
    here rather than on the next search.
    """
    config = replace(_current_config.get(), method=resolve_method(method))
    _current_config.set(config)
    return config


def current_config() -> MatchConfig:
    return _current_config.get()


def find_best(template: np.ndarray, image: np.ndarray, return_center: bool = True) -> MatchPoint:
    return TemplateMatcher(current_config()).find_best(template, image, return_center=return_center)


def find_all(
    template: np.ndarray,
    image: np.ndarray,
    max_count: int,
    threshold: float,
    return_center: bool = True,
) -> List[MatchPoint]:
    return TemplateMatcher(current_config()).find_all(
        template, image, max_count, threshold, return_center=return_center
    )


__all__ = [
    "MatchConfig",
    "MatchPoint",
    "TemplateMatcher",
    "configure_metric",
    "current_config",
    "find_all",
    "find_best",
]
