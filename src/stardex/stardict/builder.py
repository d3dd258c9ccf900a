"""
Build StarDict dictionaries from plain definitions or tab files.

Tab file format (UTF-8):

    headword<TAB>definition, where \\n stands for a newline

    alpha|beta
    a multi-line definition shared by "alpha" and "beta"
    gamma<TAB>a nested definition; "gamma" points at this part only

A line without a TAB starts a block: its ``|``-separated headwords share the
lines that follow, up to the next blank line.
"""

import gzip
import logging
from pathlib import Path
from typing import Iterable

from .engine import DictionaryFiles
from .index import encode_index, headword_sort_key
from .metadata import format_metadata
from .models import DictionaryMetadata, FormatVersion, IndexEntry

logger = logging.getLogger("stardex")


class DefinitionCollector:
    """Accumulates payload text and headword ranges for a new dictionary.

    Headwords are keyed by ``(lowercase, literal)``; adding the same
    headword twice warns and keeps the later range.
    """

    def __init__(self) -> None:
        self._content = bytearray()
        self._ranges: dict[tuple[str, str], tuple[int, int]] = {}

    @property
    def size(self) -> int:
        """Current payload size in bytes."""
        return len(self._content)

    def append_text(self, text: str) -> int:
        """Append raw payload text and return the offset it was written at."""
        offset = len(self._content)
        self._content += text.encode("utf-8")
        return offset

    def register(self, headword: str, offset: int, length: int) -> None:
        """Point a headword at an existing payload range."""
        key = headword_sort_key(headword)
        if key in self._ranges:
            logger.warning(f"Duplicate headword {headword!r}, keeping the later definition")
        self._ranges[key] = (offset, length)

    def add(self, headword: str, definition: str) -> bool:
        """Append a definition for a headword. Returns False if it was skipped."""
        if not headword:
            logger.warning("Skipping definition with an empty headword")
            return False
        if not definition:
            logger.warning(f"No content found for {headword!r}")
            return False
        length = len(definition.encode("utf-8"))
        offset = self.append_text(definition)
        self.register(headword, offset, length)
        return True

    def content(self) -> bytes:
        return bytes(self._content)

    def entries(self) -> list[IndexEntry]:
        """Index entries in lookup order."""
        return [
            IndexEntry(literal, offset, length)
            for (_, literal), (offset, length) in sorted(self._ranges.items())
        ]

    def __len__(self) -> int:
        return len(self._ranges)


def parse_tabfile(text: str) -> DefinitionCollector:
    """Parse tab file text into a DefinitionCollector."""
    collector = DefinitionCollector()
    lines = iter(text.splitlines())

    for raw in lines:
        line = raw.strip()
        if not line:
            continue

        headword, tab, definition = line.partition("\t")
        if tab:
            collector.add(headword, definition.replace("\\n", "\n"))
            continue

        # Block: headwords on this line, definition on the following lines
        start = collector.size
        for body in lines:
            if not body.strip():
                break
            collector.append_text("\n")
            body = body.replace("\\n", "\n")
            nested, tab, nested_definition = body.partition("\t")
            if tab:
                nested_offset = collector.size + len(nested.encode("utf-8")) + 1
                collector.register(nested, nested_offset, len(nested_definition.encode("utf-8")))
            collector.append_text(body)

        length = collector.size - start
        if length == 0:
            logger.warning(f"No content found for {line!r}")
            continue

        for word in sorted({word.strip() for word in line.split("|") if word.strip()}):
            collector.register(word, start, length)

    return collector


def write_collector(
    collector: DefinitionCollector,
    directory: Path | str,
    name: str,
    basename: str | None = None,
    version: FormatVersion = FormatVersion.V2_4_2,
    compress: bool = False,
    **metadata_fields: str,
) -> DictionaryFiles:
    """
    Write a collector's contents as ``.ifo``, ``.idx`` and ``.dict``/``.dict.dz``.

    Args:
        collector: Accumulated definitions
        directory: Output directory (created if missing)
        name: Dictionary display name (``bookname``)
        basename: File name stem; defaults to ``name``
        version: Index format version
        compress: Write a gzip-compressed ``.dict.dz`` instead of ``.dict``
        **metadata_fields: Extra descriptive metadata (author, description, ...)

    Returns:
        Paths of the written files
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    stem = basename or name

    entries = collector.entries()
    index_bytes = encode_index(entries, version)
    metadata = DictionaryMetadata(
        format_version=version,
        book_name=name,
        entry_count=len(entries),
        index_file_size=len(index_bytes),
        index_offset_bits=64 if version is FormatVersion.V3_0_0 else 0,
        same_type_sequence="m",
        **metadata_fields,
    )

    ifo_path = directory / f"{stem}.ifo"
    idx_path = directory / f"{stem}.idx"
    content = collector.content()
    if compress:
        payload_path = directory / f"{stem}.dict.dz"
        content = gzip.compress(content)
    else:
        payload_path = directory / f"{stem}.dict"

    ifo_path.write_text(format_metadata(metadata), encoding="utf-8")
    idx_path.write_bytes(index_bytes)
    payload_path.write_bytes(content)

    logger.info(f"Wrote dictionary '{name}' ({len(entries)} entries) to {directory}")
    return DictionaryFiles(ifo=ifo_path, idx=idx_path, payload=payload_path)


def write_stardict(
    directory: Path | str,
    name: str,
    definitions: Iterable[tuple[str, str]],
    **options,
) -> DictionaryFiles:
    """
    Write a dictionary from ``(headword, definition)`` pairs.

    Accepts the same keyword options as :func:`write_collector`.
    """
    collector = DefinitionCollector()
    for headword, definition in definitions:
        collector.add(headword, definition)
    return write_collector(collector, directory, name, **options)


def build_from_tabfile(
    path: Path | str,
    out_dir: Path | str | None = None,
    *,
    version: FormatVersion = FormatVersion.V2_4_2,
    compress: bool = False,
) -> DictionaryFiles:
    """
    Convert a tab file into a StarDict dictionary.

    The output files share the tab file's stem and default to its directory;
    the dictionary is named after the tab file.
    """
    path = Path(path)
    collector = parse_tabfile(path.read_text(encoding="utf-8"))
    return write_collector(
        collector,
        out_dir if out_dir is not None else path.parent,
        name=path.name,
        basename=path.stem,
        version=version,
        compress=compress,
    )
