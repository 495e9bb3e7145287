"""
Common utilities for FPL Pulse.

This module provides core functionality used across the package:
- Configuration management
- In-memory TTL caching
- Logging setup
- Error types
- Display formatting
"""

from .config import get_config, get_logger
from .cache import TTLCache
from .errors import (
    FetchError,
    TransportFailure,
    HTTPStatusFailure,
    ParseFailure,
    ValidationFailure,
    AllProxiesExhausted,
    FetchTimeout,
    FetchCancelled,
    NoArticlesAvailable,
)

__all__ = [
    "get_config",
    "get_logger",
    "TTLCache",
    "FetchError",
    "TransportFailure",
    "HTTPStatusFailure",
    "ParseFailure",
    "ValidationFailure",
    "AllProxiesExhausted",
    "FetchTimeout",
    "FetchCancelled",
    "NoArticlesAvailable",
]
