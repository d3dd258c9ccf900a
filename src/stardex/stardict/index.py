"""
Reader and writer for StarDict ``.idx`` files.

The index is a flat sequence of records:

    <headword bytes> 0x00 <offset> <length>

where ``offset`` and ``length`` are big-endian unsigned integers, 4 bytes
each for version 2.4.2 and 8 bytes each for version 3.0.0.
"""

import logging
import struct
from pathlib import Path
from typing import Iterable, Iterator

from ..exceptions import DictionaryIOError, UnsupportedVersionError
from .models import FormatVersion, IndexEntry

logger = logging.getLogger("stardex")

REPLACEMENT_CHAR = "\ufffd"

_RECORD_STRUCTS = {
    FormatVersion.V2_4_2: struct.Struct(">II"),
    FormatVersion.V3_0_0: struct.Struct(">QQ"),
}


def _record_struct(version: FormatVersion, path: Path | str | None = None) -> struct.Struct:
    record = _RECORD_STRUCTS.get(version)
    if record is None:
        raise UnsupportedVersionError(
            f"Wrong stardict version {version.value!r} for idx file {path}",
            path=path,
            details={"version": version.value},
        )
    return record


def decode_headword(raw: bytes) -> str:
    """Decode headword bytes, dropping anything that is not valid UTF-8."""
    return raw.decode("utf-8", errors="replace").replace(REPLACEMENT_CHAR, "")


def headword_sort_key(word: str) -> tuple[str, str]:
    """Sort key for headwords: case-insensitive first, literal as tie-break."""
    return (word.lower(), word)


def iter_index_records(
    data: bytes,
    version: FormatVersion,
    path: Path | str | None = None,
) -> Iterator[IndexEntry]:
    """
    Decode index records from raw ``.idx`` bytes, in file order.

    Records whose headword decodes to an empty string are skipped. Running
    out of data exactly where a new record would start ends iteration.

    Args:
        data: Raw index file contents
        version: Format version deciding the integer width
        path: Source path, used for error messages only

    Yields:
        IndexEntry for each non-empty headword

    Raises:
        UnsupportedVersionError: If ``version`` is UNKNOWN
        DictionaryIOError: If a headword is not followed by a full
            offset/length pair
    """
    record = _record_struct(version, path)
    size = len(data)
    pos = 0

    while pos < size:
        nul = data.find(b"\0", pos)
        word_end = size if nul == -1 else nul
        fields_at = size if nul == -1 else nul + 1

        if fields_at + record.size > size:
            raise DictionaryIOError(
                f"Failed to parse idx file {path}: truncated record at byte {pos}",
                path=path,
                details={"position": pos},
            )

        headword = decode_headword(data[pos:word_end])
        offset, length = record.unpack_from(data, fields_at)
        pos = fields_at + record.size

        if headword:
            yield IndexEntry(headword, offset, length)


def read_index(path: Path | str, version: FormatVersion) -> list[IndexEntry]:
    """
    Read every record of an ``.idx`` file.

    The result keeps file order; it is not guaranteed to be sorted.

    Raises:
        UnsupportedVersionError: If ``version`` is UNKNOWN (checked before
            the file is opened)
        DictionaryIOError: If the file cannot be read or a record is truncated
    """
    path = Path(path)
    _record_struct(version, path)

    try:
        data = path.read_bytes()
    except OSError as e:
        raise DictionaryIOError(f"Failed to open idx file {path}: {e}", path=path) from e

    entries = list(iter_index_records(data, version, path))
    logger.debug(f"Read {len(entries)} index records from {path}")
    return entries


def sort_entries(entries: Iterable[IndexEntry]) -> list[IndexEntry]:
    """Return entries in lookup order. The sort is stable, so duplicates keep file order."""
    return sorted(entries, key=lambda entry: headword_sort_key(entry.headword))


def is_sorted(entries: list[IndexEntry]) -> bool:
    """Check whether entries are already in lookup order."""
    keys = [headword_sort_key(entry.headword) for entry in entries]
    return all(a <= b for a, b in zip(keys, keys[1:]))


def encode_index(entries: Iterable[IndexEntry], version: FormatVersion) -> bytes:
    """
    Encode entries into ``.idx`` bytes.

    Raises:
        UnsupportedVersionError: If ``version`` is UNKNOWN
        ValueError: If an offset or length does not fit the version's width
    """
    record = _record_struct(version)
    limit = 1 << (8 * version.offset_width)
    out = bytearray()

    for entry in entries:
        if not (0 <= entry.offset < limit and 0 <= entry.length < limit):
            raise ValueError(
                f"Entry {entry.headword!r} does not fit a {version.value} index: "
                f"offset={entry.offset}, length={entry.length}"
            )
        out += entry.headword.encode("utf-8")
        out += b"\0"
        out += record.pack(entry.offset, entry.length)

    return bytes(out)
