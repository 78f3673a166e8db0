from __future__ import annotations

from pathlib import Path
from typing import Union

import cv2
import numpy as np

PathLike = Union[str, Path]


def load_image(path: PathLike, grayscale: bool = False) -> np.ndarray:
    """
    Load an image as a BGR (or single-channel) uint8 array ready for matching.
    """
    flags = cv2.IMREAD_GRAYSCALE if grayscale else cv2.IMREAD_COLOR
    image = cv2.imread(str(path), flags)
    if image is None:
        raise FileNotFoundError(f"Unable to load image at {path}")
    return image
