"""
Locate small reference images inside larger ones.
"""

import logging

from .errors import EmptySurface, InvalidDimensions, InvalidMetricConfiguration, TemplateSearchError
from .matching import (
    MatchConfig,
    MatchingMethod,
    MatchPoint,
    Polarity,
    SuppressionStrategy,
    TemplateMatcher,
    configure_metric,
    current_config,
    find_all,
    find_best,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "EmptySurface",
    "InvalidDimensions",
    "InvalidMetricConfiguration",
    "MatchConfig",
    "MatchPoint",
    "MatchingMethod",
    "Polarity",
    "SuppressionStrategy",
    "TemplateMatcher",
    "TemplateSearchError",
    "configure_metric",
    "current_config",
    "find_all",
    "find_best",
]
