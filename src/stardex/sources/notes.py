"""
Markdown note collection as a dictionary source.

A note collection is a directory with a ``pages/`` folder of markdown files
(the layout used by outliner apps such as Logseq). A page answers for a word
when:

- its file name is ``<word>.md`` (case-insensitive), or
- it is a namespaced page whose name ends with ``%2F<word>.md``, or
- one of its leading property lines is ``alias:: <word>, ...``

Property lines end at the first ``- `` block line.
"""

import logging
from datetime import datetime
from pathlib import Path

from ..exceptions import MissingFileError
from .base import DictionarySource, LookupItem, SourceType

logger = logging.getLogger("stardex")

ALIAS_PREFIX = "alias:: "
NAMESPACE_SEPARATOR = "%2F"


class NotesSource(DictionarySource):
    """Dictionary source over a folder of markdown pages."""

    def __init__(self, path: Path | str, source_id: str | None = None):
        """
        Args:
            path: Root of the note collection (the folder holding ``pages/``)
            source_id: Optional custom ID, derived from the folder name otherwise

        Raises:
            MissingFileError: If ``<path>/pages`` is not a directory
        """
        self.path = Path(path)
        self.pages_dir = self.path / "pages"
        if not self.pages_dir.is_dir():
            raise MissingFileError(f"Note collection {self.path} has no pages directory", path=self.path)

        super().__init__(
            source_id=source_id or f"notes-{self.path.name.lower()}",
            source_type=SourceType.NOTES,
            name=self.path.name or "notes",
        )
        self.loaded_at = datetime.now()

    def _pages(self) -> list[Path]:
        return sorted(p for p in self.pages_dir.rglob("*") if p.is_file())

    @staticmethod
    def _aliases(page: Path) -> list[str] | None:
        """Aliases declared in a page's leading properties; None if unreadable."""
        aliases: list[str] = []
        try:
            with open(page, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.rstrip("\r\n")
                    if line.startswith(ALIAS_PREFIX):
                        aliases.extend(a.strip().lower() for a in line[len(ALIAS_PREFIX):].split(","))
                    elif line.startswith("- "):
                        break
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Skipping unreadable page {page}: {e}")
            return None
        return aliases

    def find_page(self, word: str) -> Path | None:
        """Find the page answering for ``word``."""
        target = f"{word.lower()}.md"

        for page in self._pages():
            name = page.name.lower()
            if name == target:
                return page
            _, sep, leaf = name.rpartition(NAMESPACE_SEPARATOR.lower())
            if sep and leaf == target:
                return page

            aliases = self._aliases(page)
            if aliases and word.lower() in aliases:
                return page

        return None

    def exact_lookup(self, word: str) -> LookupItem | None:
        page = self.find_page(word)
        if page is None:
            return None
        try:
            contents = page.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read note page {page}: {e}")
            return None
        return LookupItem(word, f"{page.name}\n{contents}", self.name)

    def fuzzy_lookup(self, word: str) -> list[LookupItem] | None:
        item = self.exact_lookup(word)
        return [item] if item else None

    def entry_count(self) -> int | None:
        return None
