"""
Exceptions raised by the template search engine.
"""

from __future__ import annotations


class TemplateSearchError(Exception):
    """
    Base class for every error raised by tmplsearch.
    """


class InvalidDimensions(TemplateSearchError, ValueError):
    """
    The template does not fit inside the search image.
    """

    def __init__(self, template_size: tuple[int, int], image_size: tuple[int, int]) -> None:
        self.template_size = template_size
        self.image_size = image_size
        super().__init__(
            f"template {template_size[0]}x{template_size[1]} does not fit "
            f"inside image {image_size[0]}x{image_size[1]}"
        )


class EmptySurface(TemplateSearchError):
    """
    A score surface with zero area reached the extremum search.
    """


class InvalidMetricConfiguration(TemplateSearchError, ValueError):
    """
    An unknown matching method was requested.
    """


__all__ = ["EmptySurface", "InvalidDimensions", "InvalidMetricConfiguration", "TemplateSearchError"]
