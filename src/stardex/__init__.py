"""
Stardex - offline StarDict dictionary lookups with exact and fuzzy matching.
"""

from .config import StardexConfig
from .exceptions import (
    StardexError,
    MissingFileError,
    ParseError,
    UnsupportedVersionError,
    DecodeError,
    DictionaryIOError,
    OnlineLookupError,
    ConfigError,
)
from .manager import DictionaryManager, QueryOptions, QueryOutcome, QueryStatus
from .stardict import StarDict

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("stardex")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable

__all__ = [
    "StardexConfig",
    "StardexError",
    "MissingFileError",
    "ParseError",
    "UnsupportedVersionError",
    "DecodeError",
    "DictionaryIOError",
    "OnlineLookupError",
    "ConfigError",
    "DictionaryManager",
    "QueryOptions",
    "QueryOutcome",
    "QueryStatus",
    "StarDict",
]
