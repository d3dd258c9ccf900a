"""
Local StarDict dictionary source.
"""

import logging
from datetime import datetime
from pathlib import Path

from ..stardict import FuzzyMatcher, StarDict
from .base import DictionarySource, LookupItem, SourceType

logger = logging.getLogger("stardex")


class StarDictSource(DictionarySource):
    """Dictionary source backed by a loaded StarDict directory."""

    def __init__(self, dictionary: StarDict, source_id: str | None = None):
        """
        Args:
            dictionary: Loaded dictionary
            source_id: Optional custom ID. Derived from the directory name
                (or the dictionary name) when omitted.
        """
        if source_id is None:
            stem = dictionary.directory.name if dictionary.directory else dictionary.name
            source_id = f"stardict-{stem.replace('_', '-').replace(' ', '-').lower()}"

        super().__init__(
            source_id=source_id,
            source_type=SourceType.STARDICT,
            name=dictionary.name or source_id,
        )
        self.dictionary = dictionary
        self.loaded_at = datetime.now()

    @classmethod
    def from_directory(
        cls,
        directory: Path | str,
        fuzzy: FuzzyMatcher | None = None,
        source_id: str | None = None,
    ) -> "StarDictSource":
        """Load a StarDict directory and wrap it as a source."""
        return cls(StarDict.load(directory, fuzzy=fuzzy), source_id=source_id)

    def exact_lookup(self, word: str) -> LookupItem | None:
        hit = self.dictionary.exact_lookup(word)
        if hit is None:
            return None
        return LookupItem(hit.headword, hit.translation, self.name)

    def fuzzy_lookup(self, word: str) -> list[LookupItem] | None:
        hits = self.dictionary.fuzzy_lookup(word)
        if hits is None:
            return None
        return [LookupItem(hit.headword, hit.translation, self.name) for hit in hits]

    def entry_count(self) -> int:
        return self.dictionary.entry_count()
