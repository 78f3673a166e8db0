"""
Score surface primitives: computing the surface, finding its extremum and
blanking regions that were already reported.
"""

from __future__ import annotations

import enum
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from ..errors import EmptySurface, InvalidDimensions
from .metrics import MatchingMethod, Polarity

logger = logging.getLogger(__name__)

Location = Tuple[int, int]
Window = Tuple[int, int, int, int]

_NATIVE_DTYPES = (np.uint8, np.float32)
FLOOD_FILL_TOLERANCE = 0.1


class SuppressionStrategy(enum.Enum):
    """
    How a reported match is excluded from later extremum searches.
    """

    RECTANGLE = "rectangle"
    FLOOD_FILL = "flood_fill"


def _as_matchable(template: np.ndarray, image: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    if template.dtype == image.dtype and template.dtype in _NATIVE_DTYPES:
        return template, image
    return template.astype(np.float32), image.astype(np.float32)


def compute_score_surface(template: np.ndarray, image: np.ndarray, method: MatchingMethod) -> np.ndarray:
    """
    Score every placement of ``template`` inside ``image``.

    Cell (y, x) of the returned float32 array holds the similarity of the
    template against the image region whose top-left corner is (x, y). The
    array has shape (image_h - template_h + 1, image_w - template_w + 1).
    """
    if image.ndim != template.ndim:
        raise ValueError("image and template dimensionality must match")
    if image.ndim not in (2, 3):
        raise ValueError("image must be a 2-D grayscale or 3-D multi-channel array")
    if image.ndim == 3 and image.shape[2] != template.shape[2]:
        raise ValueError("image and template channel counts must match")

    template_h, template_w = template.shape[:2]
    image_h, image_w = image.shape[:2]
    if template_w == 0 or template_h == 0 or template_w > image_w or template_h > image_h:
        raise InvalidDimensions((template_w, template_h), (image_w, image_h))

    template, image = _as_matchable(template, image)
    surface = cv2.matchTemplate(image, template, method.cv_method)
    logger.debug(
        "computed %s surface %dx%d for template %dx%d",
        method.name,
        surface.shape[1],
        surface.shape[0],
        template_w,
        template_h,
    )
    return surface


def locate_extremum(surface: np.ndarray, polarity: Polarity) -> Tuple[Location, float]:
    """
    Return the location and value of the best cell for ``polarity``.

    Ties resolve to the first cell in row-major order.
    """
    if surface.size == 0:
        raise EmptySurface(f"score surface has zero area: shape={surface.shape}")

    min_val, max_val, min_loc, max_loc = cv2.minMaxLoc(surface)
    if polarity is Polarity.MINIMIZE:
        return (int(min_loc[0]), int(min_loc[1])), float(min_val)
    return (int(max_loc[0]), int(max_loc[1])), float(max_val)


def suppression_window(
    seed: Location,
    template_size: Tuple[int, int],
    surface_shape: Tuple[int, ...],
    radius: Optional[Tuple[int, int]] = None,
) -> Window:
    """
    Rectangle (x0, y0, x1, y1), end-exclusive, centred on ``seed`` and
    clipped to the surface. The radius defaults to half the template size.
    """
    if radius is None:
        radius = (template_size[0] // 2, template_size[1] // 2)
    radius_x, radius_y = radius
    height, width = surface_shape[:2]
    x, y = seed
    x0 = max(0, x - radius_x)
    y0 = max(0, y - radius_y)
    x1 = min(width, x + radius_x + 1)
    y1 = min(height, y + radius_y + 1)
    return x0, y0, x1, y1


def suppress_rectangle(surface: np.ndarray, polarity: Polarity, window: Window) -> None:
    x0, y0, x1, y1 = window
    surface[y0:y1, x0:x1] = polarity.worst_value


def suppress_flood_fill(
    surface: np.ndarray,
    seed: Location,
    polarity: Polarity,
    window: Window,
    tolerance: float = FLOOD_FILL_TOLERANCE,
) -> None:
    """
    Blank the 4-connected cells around ``seed`` whose values step by no more
    than ``tolerance``, never leaving ``window``.
    """
    x0, y0, x1, y1 = window
    height, width = surface.shape[:2]
    # non-zero mask cells stop the fill; the mask carries a one-cell border
    mask = np.ones((height + 2, width + 2), dtype=np.uint8)
    mask[y0 + 1 : y1 + 1, x0 + 1 : x1 + 1] = 0
    flags = 4 | (255 << 8)
    _, _, _, rect = cv2.floodFill(
        surface,
        mask,
        seed,
        polarity.worst_value,
        loDiff=tolerance,
        upDiff=tolerance,
        flags=flags,
    )
    surface[seed[1], seed[0]] = polarity.worst_value
    logger.debug("flood fill from %s covered rect %s", seed, rect)


def suppress_region(
    surface: np.ndarray,
    seed: Location,
    polarity: Polarity,
    template_size: Tuple[int, int],
    strategy: SuppressionStrategy = SuppressionStrategy.RECTANGLE,
    radius: Optional[Tuple[int, int]] = None,
) -> Window:
    """
    Exclude the region around ``seed`` from later extremum searches.

    The surface is modified in place; the window the suppression was
    confined to is returned.
    """
    window = suppression_window(seed, template_size, surface.shape, radius)
    if strategy is SuppressionStrategy.FLOOD_FILL:
        suppress_flood_fill(surface, seed, polarity, window)
    else:
        suppress_rectangle(surface, polarity, window)
    return window


__all__ = [
    "FLOOD_FILL_TOLERANCE",
    "Location",
    "SuppressionStrategy",
    "Window",
    "compute_score_surface",
    "locate_extremum",
    "suppress_flood_fill",
    "suppress_rectangle",
    "suppress_region",
    "suppression_window",
]
