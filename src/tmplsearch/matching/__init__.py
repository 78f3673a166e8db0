"""
Matching subpackage exposes the template search APIs.
"""

from .engine import (
    MatchConfig,
    MatchPoint,
    TemplateMatcher,
    configure_metric,
    current_config,
    find_all,
    find_best,
)
from .metrics import MatchingMethod, Polarity, resolve_method
from .surface import SuppressionStrategy

__all__ = [
    "MatchConfig",
    "MatchPoint",
    "MatchingMethod",
    "Polarity",
    "SuppressionStrategy",
    "TemplateMatcher",
    "configure_metric",
    "current_config",
    "find_all",
    "find_best",
    "resolve_method",
]
