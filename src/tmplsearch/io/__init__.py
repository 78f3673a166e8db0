"""
IO helpers for loading the pixel buffers consumed by the matcher.
"""

from .image_loader import load_image

__all__ = ["load_image"]
