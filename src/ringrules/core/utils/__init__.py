"""
Core utilities module.

Provides shared helpers used across all layers.
"""

from ringrules.core.utils.time import parse_timestamp, utc_now

__all__ = ["parse_timestamp", "utc_now"]
