"""
StarDict dictionary engine.

Loads a dictionary directory (``.ifo`` + ``.idx`` + ``.dict``/``.dict.dz``)
into an immutable, queryable snapshot and answers exact and fuzzy lookups.

Example:
    >>> dictionary = StarDict.load("dicts/cdict-gb")
    >>> dictionary.exact_lookup("RUST").translation
    'n. 铁锈 ...'
    >>> [hit.headword for hit in dictionary.fuzzy_lookup("rsut")]
    ['rust']
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ..exceptions import DictionaryIOError, MissingFileError
from .fuzzy import FuzzyMatcher
from .index import is_sorted, read_index, sort_entries
from .metadata import read_metadata
from .models import DictEntry, DictionaryMetadata, IndexEntry
from .payload import PayloadStore

logger = logging.getLogger("stardex")

IFO_SUFFIX = ".ifo"
IDX_SUFFIX = ".idx"
PAYLOAD_SUFFIXES = (".dict.dz", ".dz", ".dict")


@dataclass(frozen=True)
class DictionaryFiles:
    """The three files making up one dictionary."""
    ifo: Path
    idx: Path
    payload: Path


def _file_role(path: Path) -> str | None:
    name = path.name.lower()
    if name.endswith(IFO_SUFFIX):
        return "ifo"
    if name.endswith(IDX_SUFFIX):
        return "idx"
    if name.endswith(PAYLOAD_SUFFIXES):
        return "dict"
    return None


def locate_files(directory: Path | str) -> DictionaryFiles:
    """
    Find the metadata, index and payload files of a dictionary directory.

    Exactly one file per role is required; files with other extensions
    (``.syn``, ``.idx.gz``, resources, ...) are ignored.

    Raises:
        MissingFileError: If the directory does not exist, or a role has
            no file or more than one candidate
        DictionaryIOError: If the directory cannot be listed
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise MissingFileError(f"Dictionary directory {directory} does not exist", path=directory)

    found: dict[str, list[Path]] = {"ifo": [], "idx": [], "dict": []}
    try:
        children = sorted(directory.iterdir())
    except OSError as e:
        raise DictionaryIOError(f"Failed to open directory {directory}: {e}", path=directory) from e

    for child in children:
        if not child.is_file():
            continue
        role = _file_role(child)
        if role:
            found[role].append(child)

    for role, candidates in found.items():
        if not candidates:
            raise MissingFileError(
                f"Stardict file is incomplete in {directory}: no .{role} file",
                path=directory,
                role=role,
            )
        if len(candidates) > 1:
            names = ", ".join(c.name for c in candidates)
            raise MissingFileError(
                f"Ambiguous .{role} files in {directory}: {names}",
                path=directory,
                role=role,
                candidates=candidates,
            )

    return DictionaryFiles(ifo=found["ifo"][0], idx=found["idx"][0], payload=found["dict"][0])


class StarDict:
    """An immutable, loaded StarDict dictionary.

    Index entries are kept sorted by lowercase headword with the literal
    headword as tie-break, which makes binary search valid. Entries whose
    definition range falls outside the payload are dropped when the
    dictionary is built, so every kept entry can be sliced safely.

    All query methods are read-only and safe to call from several threads.
    """

    def __init__(
        self,
        metadata: DictionaryMetadata,
        entries: Iterable[IndexEntry],
        payload: PayloadStore,
        fuzzy: FuzzyMatcher | None = None,
        directory: Path | str | None = None,
    ):
        """
        Build a dictionary from already-read parts.

        Materializes the payload, since entries are checked against its
        decoded length.

        Args:
            metadata: Parsed ``.ifo`` contents
            entries: Index records in any order
            payload: Payload store (materialized here if not already)
            fuzzy: Fuzzy matching policy; raw Levenshtein by default
            directory: Source directory, for display only
        """
        self.metadata = metadata
        self.payload = payload
        self.fuzzy = fuzzy or FuzzyMatcher()
        self.directory = Path(directory) if directory is not None else None

        payload_size = len(payload.materialize())
        ordered = list(entries)
        if not is_sorted(ordered):
            logger.debug(f"Index of '{metadata.book_name}' is not in lookup order, sorting")
            ordered = sort_entries(ordered)
        kept = [entry for entry in ordered if entry.end <= payload_size]
        dropped = len(ordered) - len(kept)
        if dropped:
            logger.debug(
                f"Dropped {dropped} index entries of '{metadata.book_name}' "
                f"pointing past the {payload_size}-byte payload"
            )

        self._entries: tuple[IndexEntry, ...] = tuple(kept)
        self._headwords = [entry.headword for entry in kept]
        self._folded = [word.lower() for word in self._headwords]
        self._fuzzy_keys = self.fuzzy.prepare(self._headwords)

    @classmethod
    def load(cls, directory: Path | str, fuzzy: FuzzyMatcher | None = None) -> "StarDict":
        """
        Load a dictionary directory.

        Args:
            directory: Directory holding one ``.ifo``, one ``.idx`` and one
                ``.dict`` or ``.dict.dz`` file
            fuzzy: Fuzzy matching policy; raw Levenshtein by default

        Raises:
            MissingFileError: If a required file is missing or ambiguous
            ParseError: If the metadata is malformed
            UnsupportedVersionError: If the format version is not supported
            DecodeError: If the payload cannot be decompressed or decoded
            DictionaryIOError: If a file cannot be read or the index is truncated
        """
        files = locate_files(directory)
        metadata = read_metadata(files.ifo)
        entries = read_index(files.idx, metadata.format_version)
        payload = PayloadStore(files.payload)

        dictionary = cls(metadata, entries, payload, fuzzy=fuzzy, directory=directory)
        logger.info(
            f"Loaded dictionary '{dictionary.name}' from {directory}: "
            f"{dictionary.entry_count()} declared, {dictionary.loaded_count()} usable entries"
        )
        return dictionary

    # =========================================================================
    # Statistics
    # =========================================================================

    @property
    def name(self) -> str:
        """Display name of the dictionary (``bookname``)."""
        return self.metadata.book_name

    @property
    def entries(self) -> tuple[IndexEntry, ...]:
        """Index entries in lookup order."""
        return self._entries

    def entry_count(self) -> int:
        """Word count declared in the metadata."""
        return self.metadata.entry_count

    def loaded_count(self) -> int:
        """Number of index entries that survived loading."""
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    # =========================================================================
    # Lookups
    # =========================================================================

    def _resolve(self, position: int) -> DictEntry:
        entry = self._entries[position]
        return DictEntry(entry.headword, self.payload.slice(entry.offset, entry.length))

    def exact_lookup(self, word: str) -> DictEntry | None:
        """
        Look up a headword case-insensitively.

        When several headwords differ only by case, the one matching
        ``word`` literally wins; otherwise the first in index order.

        Returns:
            The matching entry, or None if the word is absent
        """
        folded = word.lower()
        lo = bisect_left(self._folded, folded)
        if lo == len(self._folded) or self._folded[lo] != folded:
            return None

        hi = bisect_right(self._folded, folded, lo)
        literal = bisect_left(self._headwords, word, lo, hi)
        if literal < hi and self._headwords[literal] == word:
            return self._resolve(literal)
        return self._resolve(lo)

    def fuzzy_lookup(self, word: str) -> list[DictEntry] | None:
        """
        Find the headwords closest to ``word`` by edit distance.

        Every entry at the minimum distance is returned, in index order.

        Returns:
            The closest entries, or None if the dictionary is empty (or, for
            the stripped policy, nothing is close enough)
        """
        positions = self.fuzzy.best_matches(word, self._fuzzy_keys)
        if positions is None:
            return None
        return [self._resolve(position) for position in positions]

    def __repr__(self) -> str:
        return f"StarDict(name={self.name!r}, entries={len(self._entries)})"
