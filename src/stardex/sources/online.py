"""
Adapter turning an online lookup collaborator into a dictionary source.

The network client itself lives outside this package; anything with a
``lookup(word) -> Translation`` method can be plugged in.
"""

import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from ..exceptions import OnlineLookupError
from .base import DictionarySource, LookupItem, SourceType

logger = logging.getLogger("stardex")


class Translation(BaseModel):
    """A translation returned by an online service."""
    word: str = Field(description="The word as the service understood it")
    translation: str = Field(description="Translation or definition text")
    difficulty_levels: list[str] = Field(
        default_factory=list,
        description="Exam word lists the word belongs to (e.g. CET4, TOEFL)"
    )


class OnlineLookup(ABC):
    """Collaborator interface for online dictionaries."""

    name: str = "online"

    @abstractmethod
    def lookup(self, word: str) -> Translation:
        """
        Translate a word.

        Raises:
            OnlineLookupError: If the service fails or knows nothing about the word
        """
        pass


class OnlineSource(DictionarySource):
    """Dictionary source delegating to an OnlineLookup collaborator.

    Online services answer exact queries only, so fuzzy lookup always
    returns None and no word count is reported.
    """

    def __init__(self, client: OnlineLookup, source_id: str | None = None):
        name = getattr(client, "name", None) or "online"
        super().__init__(
            source_id=source_id or f"online-{name.lower()}",
            source_type=SourceType.ONLINE,
            name=name,
        )
        self.client = client

    @property
    def supports_fuzzy(self) -> bool:
        return False

    def exact_lookup(self, word: str) -> LookupItem | None:
        try:
            result = self.client.lookup(word)
        except OnlineLookupError as e:
            logger.warning(f"{self.name}: failed to look up {word!r}: {e}")
            return None

        translation = result.translation.strip()
        if not translation:
            logger.debug(f"{self.name}: found nothing for {word!r}")
            return None

        return LookupItem(
            word=result.word or word,
            translation=translation,
            source=self.name,
            difficulty_levels=list(result.difficulty_levels),
        )

    def fuzzy_lookup(self, word: str) -> list[LookupItem] | None:
        return None

    def entry_count(self) -> int | None:
        return None
