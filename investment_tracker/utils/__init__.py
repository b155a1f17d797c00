# investment_tracker/utils/__init__.py
"""
Utility modules for the Investment Tracker engine.

This package contains cross-cutting utilities used throughout the engine:
- logging: Logging configuration and setup with correlation ID support
- context: Context-local correlation IDs (one per import batch or request)
- fx_conversion: Home-currency conversion through a pluggable rate source

Usage:
    from investment_tracker.utils import setup_logging
    from investment_tracker.utils import correlation_scope, get_correlation_id
    from investment_tracker.utils import convert_to_home
"""

from investment_tracker.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
    new_correlation_id,
    correlation_scope,
)
from investment_tracker.utils.fx_conversion import convert_to_home, convert_with_rate
from investment_tracker.utils.logging import setup_logging

__all__ = [
    # Logging
    "setup_logging",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "new_correlation_id",
    "correlation_scope",
    # FX
    "convert_to_home",
    "convert_with_rate",
]
