"""
Abstract base class for dictionary sources.

Every kind of dictionary (local StarDict files, an online service, a folder
of markdown notes) answers the same questions: what is it called, how many
words does it hold, and what does it say about a word. This module defines
that interface so the DictionaryManager can treat all sources uniformly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class SourceType(str, Enum):
    """Kind of dictionary source."""
    STARDICT = "stardict"
    ONLINE = "online"
    NOTES = "notes"


class ResultKind(str, Enum):
    """Outcome of a single-source lookup."""
    EXACT = "exact"
    FUZZY = "fuzzy"
    NONE = "none"


@dataclass
class LookupItem:
    """A word and its translation as returned by a source."""
    word: str
    translation: str
    source: str
    difficulty_levels: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "word": self.word,
            "translation": self.translation,
            "source": self.source,
            "difficulty_levels": list(self.difficulty_levels),
        }

    def __str__(self) -> str:
        levels = " ".join(f"<{level}>" for level in self.difficulty_levels)
        text = f"{self.word}\n{self.translation.strip()}"
        return f"{text}\n{levels}" if levels else text


@dataclass
class LookupResult:
    """Result of looking a word up in one source."""
    kind: ResultKind = ResultKind.NONE
    items: list[LookupItem] = field(default_factory=list)

    @classmethod
    def exact(cls, item: LookupItem) -> "LookupResult":
        return cls(ResultKind.EXACT, [item])

    @classmethod
    def fuzzy(cls, items: list[LookupItem]) -> "LookupResult":
        return cls(ResultKind.FUZZY, list(items))

    @classmethod
    def none(cls) -> "LookupResult":
        return cls()

    def __bool__(self) -> bool:
        return self.kind is not ResultKind.NONE and bool(self.items)


class DictionarySource(ABC):
    """
    Abstract base class for dictionary sources.

    Subclasses implement the lookups; :meth:`look_up` combines them the way
    an interactive query wants (exact first, then fuzzy when allowed).
    """

    def __init__(
        self,
        source_id: str,
        source_type: SourceType,
        name: str | None = None,
    ):
        """
        Initialize the source.

        Args:
            source_id: Unique identifier for this source instance
            source_type: Kind of source
            name: Human-readable name for the source
        """
        self.source_id = source_id
        self.source_type = source_type
        self.name = name or source_id
        self.loaded_at: datetime | None = None

    @property
    def supports_fuzzy(self) -> bool:
        """Whether :meth:`fuzzy_lookup` can return anything."""
        return True

    # =========================================================================
    # Abstract Methods - Must be implemented by subclasses
    # =========================================================================

    @abstractmethod
    def exact_lookup(self, word: str) -> LookupItem | None:
        """
        Look up a word exactly (case-insensitively).

        Returns:
            LookupItem if found, None otherwise
        """
        pass

    @abstractmethod
    def fuzzy_lookup(self, word: str) -> list[LookupItem] | None:
        """
        Look up words close to ``word``.

        Returns:
            Closest matches, or None if there are none
        """
        pass

    @abstractmethod
    def entry_count(self) -> int | None:
        """Number of words in the source, or None if not applicable."""
        pass

    # =========================================================================
    # Helpers
    # =========================================================================

    def look_up(self, word: str, enable_fuzzy: bool = False) -> LookupResult:
        """Exact lookup, falling back to fuzzy lookup when enabled and supported."""
        item = self.exact_lookup(word)
        if item is not None:
            return LookupResult.exact(item)

        if enable_fuzzy and self.supports_fuzzy:
            items = self.fuzzy_lookup(word)
            if items:
                return LookupResult.fuzzy(items)

        return LookupResult.none()

    def close(self) -> None:
        """Release any resources held by the source."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.source_id!r}, name={self.name!r})"
