"""
DictionaryManager - Orchestrates multiple dictionary sources.

This module provides the main entry point for looking words up: it loads
every configured dictionary, fans a query out across them, falls back to the
online dictionary when nothing local matches, and finally offers fuzzy
candidates.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from threading import RLock
from typing import Any, Iterable

from .config import StardexConfig
from .exceptions import StardexError
from .sources.base import DictionarySource, LookupItem, SourceType
from .sources.notes import NotesSource
from .sources.offline import StarDictSource
from .sources.online import OnlineLookup, OnlineSource
from .stardict import StarDict

logger = logging.getLogger("stardex")


class HistoryRecorder(ABC):
    """Collaborator interface for remembering looked-up words."""

    @abstractmethod
    def record(self, word: str, metadata: dict[str, Any]) -> None:
        """Record a successful lookup of ``word``."""
        pass


class QueryStatus(str, Enum):
    """How a query was answered."""
    FOUND_LOCALLY = "found_locally"
    FOUND_ONLINE = "found_online"
    FUZZY = "fuzzy"
    NOT_FOUND = "not_found"


def split_non_alphanumeric_prefix(text: str) -> tuple[str, str]:
    """Split ``text`` into its leading non-alphanumeric run and the rest."""
    for i, char in enumerate(text):
        if char.isalnum():
            return text[:i], text[i:]
    return text, ""


@dataclass
class QueryOptions:
    """Per-query behaviour switches.

    A query may carry its own options as a symbol prefix:

    - ``@word``: ask the online dictionary first
    - ``|word``: exact match only
    - ``/word``: allow fuzzy matching
    """
    prioritize_online: bool = False
    exact_only: bool = False

    @classmethod
    def parse_prefixed_word(cls, text: str) -> tuple["QueryOptions | None", str]:
        """
        Split a raw query into options and the word itself.

        Returns:
            (options, word), where options is None when the query has no prefix
        """
        prefix, word = split_non_alphanumeric_prefix(text)
        if not prefix:
            return None, word

        options = cls()
        if "@" in prefix:
            options.prioritize_online = True
        if "/" in prefix:
            options.exact_only = False
        if "|" in prefix:
            options.exact_only = True
        return options, word


@dataclass
class QueryOutcome:
    """Result of a manager-level query."""
    word: str
    status: QueryStatus
    items: list[LookupItem] = field(default_factory=list)

    @property
    def found(self) -> bool:
        """Whether an exact (local or online) answer was found."""
        return self.status in (QueryStatus.FOUND_LOCALLY, QueryStatus.FOUND_ONLINE)

    def pairs(self) -> list[tuple[str, str]]:
        """``(headword, translation)`` pairs, as consumed by renderers."""
        return [(item.word, item.translation) for item in self.items]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "word": self.word,
            "status": self.status.value,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class DictionarySummary:
    """One row of the dictionary listing."""
    name: str
    source_type: SourceType
    word_count: int | None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "type": self.source_type.value,
            "word_count": self.word_count,
        }


def discover_dictionary_dirs(paths: Iterable[Path | str]) -> tuple[list[Path], dict[str, str]]:
    """
    Expand configured paths into dictionary directories.

    A path holding an ``.ifo`` file is a dictionary itself; otherwise each of
    its subdirectories is taken as a dictionary, sorted by name.

    Returns:
        (directories in deterministic order, {path: problem} for unusable paths)
    """
    found: list[Path] = []
    problems: dict[str, str] = {}
    seen: set[Path] = set()

    for raw in paths:
        path = Path(raw).expanduser()
        if not path.is_dir():
            problems[str(path)] = "not a directory"
            continue

        try:
            children = sorted(path.iterdir(), key=lambda p: p.name)
        except OSError as e:
            problems[str(path)] = f"cannot list directory: {e}"
            continue

        if any(child.is_file() and child.suffix.lower() == ".ifo" for child in children):
            candidates = [path]
        else:
            candidates = [child for child in children if child.is_dir()]

        for candidate in candidates:
            key = candidate.resolve()
            if key not in seen:
                seen.add(key)
                found.append(candidate)

    return found, problems


class DictionaryManager:
    """
    Orchestrates multiple dictionary sources behind one query interface.

    Local sources keep the order they were loaded in (directories sorted by
    name). Online sources are consulted when nothing local matches, or first
    when the query asks for it.

    Thread-safe for concurrent queries.
    """

    def __init__(
        self,
        config: StardexConfig | None = None,
        online: OnlineLookup | OnlineSource | None = None,
        history: HistoryRecorder | None = None,
    ):
        """
        Initialize the manager. No dictionary is loaded until :meth:`load`.

        Args:
            config: Dictionary locations and query defaults
            online: Optional online dictionary collaborator
            history: Optional collaborator recording successful lookups
        """
        self.config = config or StardexConfig()
        self.history = history
        self._sources: dict[str, DictionarySource] = {}
        self._order: list[str] = []
        self._failures: dict[str, str] = {}
        self._lock = RLock()

        if online is not None:
            source = online if isinstance(online, OnlineSource) else OnlineSource(online)
            self.add_source(source)

    @classmethod
    def from_config(
        cls,
        config: StardexConfig,
        online: OnlineLookup | OnlineSource | None = None,
        history: HistoryRecorder | None = None,
    ) -> "DictionaryManager":
        """Create a manager and load everything the configuration names."""
        manager = cls(config, online=online, history=history)
        manager.load()
        return manager

    @property
    def sources(self) -> list[DictionarySource]:
        """Registered sources in load order."""
        with self._lock:
            return [self._sources[sid] for sid in self._order]

    @property
    def source_ids(self) -> list[str]:
        """IDs of all registered sources, in load order."""
        with self._lock:
            return list(self._order)

    @property
    def failures(self) -> dict[str, str]:
        """Paths that could not be loaded, with the reason."""
        with self._lock:
            return dict(self._failures)

    def local_sources(self) -> list[DictionarySource]:
        return [s for s in self.sources if s.source_type is not SourceType.ONLINE]

    def online_sources(self) -> list[DictionarySource]:
        return [s for s in self.sources if s.source_type is SourceType.ONLINE]

    # =========================================================================
    # Source Management
    # =========================================================================

    def add_source(self, source: DictionarySource) -> None:
        """
        Register a source. A source with the same ID is replaced and moves
        to the end of the order.
        """
        with self._lock:
            if source.source_id in self._sources:
                self._order.remove(source.source_id)
            self._sources[source.source_id] = source
            self._order.append(source.source_id)
        logger.debug(f"Registered source: {source.source_id}")

    def unload_source(self, source_id: str) -> bool:
        """
        Remove a source.

        Returns:
            True if the source was removed, False if it was not registered
        """
        with self._lock:
            source = self._sources.pop(source_id, None)
            if source is None:
                return False
            self._order.remove(source_id)
        source.close()
        logger.info(f"Unloaded source: {source_id}")
        return True

    def _unique_id(self, base: str) -> str:
        with self._lock:
            candidate, n = base, 2
            while candidate in self._sources:
                candidate = f"{base}-{n}"
                n += 1
            return candidate

    def _record_failure(self, path: Path | str, reason: str) -> None:
        with self._lock:
            self._failures[str(path)] = reason
        logger.warning(f"Skipping {path}: {reason}")

    def load(self) -> int:
        """
        Load every dictionary and note collection named by the configuration.

        Dictionaries are read in parallel but registered in discovery order.
        A directory that fails to load is skipped and listed in
        :attr:`failures`.

        Returns:
            Number of sources successfully loaded
        """
        directories, problems = discover_dictionary_dirs(self.config.dictionary_dirs)
        for path, reason in problems.items():
            self._record_failure(path, reason)

        fuzzy = self.config.fuzzy_matcher()
        loaded = 0

        with ThreadPoolExecutor(max_workers=self.config.load_workers) as executor:
            futures = [
                (directory, executor.submit(StarDict.load, directory, fuzzy))
                for directory in directories
            ]
            for directory, future in futures:
                try:
                    dictionary = future.result()
                except StardexError as e:
                    self._record_failure(directory, str(e))
                    continue
                source = StarDictSource(dictionary)
                source.source_id = self._unique_id(source.source_id)
                self.add_source(source)
                loaded += 1

        for notes_dir in self.config.notes_dirs:
            try:
                source = NotesSource(notes_dir)
            except StardexError as e:
                self._record_failure(notes_dir, str(e))
                continue
            source.source_id = self._unique_id(source.source_id)
            self.add_source(source)
            loaded += 1

        logger.info(
            f"Loaded {loaded} dictionary sources"
            + (f", skipped {len(self.failures)}" if self.failures else "")
        )
        return loaded

    # =========================================================================
    # Query Methods
    # =========================================================================

    def default_options(self) -> QueryOptions:
        return QueryOptions(
            prioritize_online=self.config.prioritize_online,
            exact_only=self.config.exact_only,
        )

    def exact_matches(self, word: str) -> list[LookupItem]:
        """Exact hits from every local source, in load order."""
        items = []
        for source in self.local_sources():
            item = source.exact_lookup(word)
            if item is not None:
                items.append(item)
            else:
                logger.debug(f"No exact match for {word!r} in {source.name}")
        return items

    def online_match(self, word: str) -> LookupItem | None:
        """First answer from the online sources."""
        for source in self.online_sources():
            item = source.exact_lookup(word)
            if item is not None:
                return item
        return None

    def fuzzy_matches(self, word: str) -> list[LookupItem]:
        """Fuzzy candidates from every fuzzy-capable local source, concatenated."""
        items: list[LookupItem] = []
        for source in self.local_sources():
            if not source.supports_fuzzy:
                continue
            items.extend(source.fuzzy_lookup(word) or [])
        return items

    def query(self, text: str, options: QueryOptions | None = None) -> QueryOutcome:
        """
        Answer a query across all sources.

        Order: exact matches from all local sources; otherwise the online
        dictionary (tried first instead when prioritized); otherwise fuzzy
        candidates unless exact-only.

        Args:
            text: The word, optionally carrying an option prefix
            options: Explicit options; overrides both the prefix and the defaults

        Returns:
            QueryOutcome. Absence is reported as ``NOT_FOUND``, never raised.
        """
        prefixed, word = QueryOptions.parse_prefixed_word(text)
        options = options or prefixed or self.default_options()

        if not word:
            return QueryOutcome(word, QueryStatus.NOT_FOUND)

        outcome: QueryOutcome | None = None

        if options.prioritize_online:
            item = self.online_match(word)
            if item is not None:
                outcome = QueryOutcome(word, QueryStatus.FOUND_ONLINE, [item])

        if outcome is None:
            items = self.exact_matches(word)
            if items:
                outcome = QueryOutcome(word, QueryStatus.FOUND_LOCALLY, items)

        if outcome is None and not options.prioritize_online:
            item = self.online_match(word)
            if item is not None:
                outcome = QueryOutcome(word, QueryStatus.FOUND_ONLINE, [item])

        if outcome is not None:
            self._record_history(outcome)
            return outcome

        if not options.exact_only:
            logger.debug(f"Fuzzy search enabled for {word!r}")
            items = self.fuzzy_matches(word)
            if items:
                return QueryOutcome(word, QueryStatus.FUZZY, items)

        return QueryOutcome(word, QueryStatus.NOT_FOUND)

    def _record_history(self, outcome: QueryOutcome) -> None:
        if self.history is None or not outcome.items:
            return
        item = outcome.items[0]
        metadata = {
            "source": item.source,
            "status": outcome.status.value,
            "difficulty_levels": list(item.difficulty_levels),
        }
        try:
            self.history.record(item.word, metadata)
        except Exception as e:
            logger.warning(f"Failed to insert history record for {item.word!r}: {e}")

    def list_dictionaries(self) -> list[DictionarySummary]:
        """Name, type and word count of every source, local ones first."""
        return [
            DictionarySummary(source.name, source.source_type, source.entry_count())
            for source in self.local_sources() + self.online_sources()
        ]

    # =========================================================================
    # Cleanup
    # =========================================================================

    def close(self) -> None:
        """Close all sources and forget them."""
        with self._lock:
            for source in self._sources.values():
                source.close()
            self._sources.clear()
            self._order.clear()

    def __repr__(self) -> str:
        source_info = ", ".join(self._order) if self._order else "none"
        return f"DictionaryManager(sources=[{source_info}])"


__all__ = [
    "DictionaryManager",
    "DictionarySummary",
    "HistoryRecorder",
    "QueryOptions",
    "QueryOutcome",
    "QueryStatus",
    "discover_dictionary_dirs",
]
