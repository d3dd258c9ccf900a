"""
Exception hierarchy for stardex.

Loading a dictionary can fail in a handful of well-defined ways (missing files,
malformed metadata, unsupported format versions, undecodable payloads, plain
I/O failures). Each failure has its own exception class so that callers such
as the DictionaryManager can skip a broken dictionary with a precise diagnostic
instead of aborting.

Lookups never raise for absence: "not found" is always an empty result.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class StardexError(Exception):
    """Base exception for all stardex errors.

    Attributes:
        message: Human-readable error message
        details: Additional error context (always holds ``path`` when the
            error concerns a specific file or directory)
    """

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize the error.

        Args:
            message: Human-readable error message
            path: Offending file or directory, if any
            details: Optional dictionary of additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})
        if path is not None:
            self.details["path"] = str(path)

    @property
    def path(self) -> str | None:
        """Path of the offending file or directory, if known."""
        return self.details.get("path")


class MissingFileError(StardexError):
    """A required dictionary file is absent, or a file role is ambiguous.

    Attributes:
        role: Which file is missing or ambiguous ("ifo", "idx" or "dict")
        candidates: Candidate files found for an ambiguous role
    """

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        role: str | None = None,
        candidates: list[Path] | None = None,
    ):
        details: dict[str, Any] = {}
        if role:
            details["role"] = role
        if candidates:
            details["candidates"] = [str(c) for c in candidates]
        super().__init__(message, path=path, details=details)
        self.role = role
        self.candidates = list(candidates or [])


class ParseError(StardexError):
    """Metadata field or index record is malformed.

    Attributes:
        key: Metadata key that failed to parse, if any
        value: The raw offending value, if any
    """

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        key: str | None = None,
        value: str | None = None,
    ):
        details: dict[str, Any] = {}
        if key is not None:
            details["key"] = key
        if value is not None:
            details["value"] = value
        super().__init__(message, path=path, details=details)
        self.key = key
        self.value = value


class UnsupportedVersionError(StardexError):
    """The dictionary's format version is not 2.4.2 or 3.0.0."""
    pass


class DecodeError(StardexError):
    """The payload cannot be decompressed or is not valid UTF-8 text."""
    pass


class DictionaryIOError(StardexError):
    """Underlying file read failed or a binary record was cut short."""
    pass


class OnlineLookupError(StardexError):
    """An online lookup collaborator failed to produce a translation."""
    pass


class ConfigError(StardexError):
    """Configuration is missing, unreadable or invalid."""
    pass


__all__ = [
    "StardexError",
    "MissingFileError",
    "ParseError",
    "UnsupportedVersionError",
    "DecodeError",
    "DictionaryIOError",
    "OnlineLookupError",
    "ConfigError",
]
