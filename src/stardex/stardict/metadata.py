"""
Reader and writer for StarDict ``.ifo`` metadata files.

The file is plain UTF-8 text, one ``key=value`` pair per line:

    StarDict's dict ifo file
    version=2.4.2
    bookname=My Dictionary
    wordcount=57510
    idxfilesize=1154288
    sametypesequence=m

Lines without ``=`` (such as the magic first line) are skipped, and unknown
keys are ignored.
"""

import logging
from pathlib import Path

from ..exceptions import DictionaryIOError, ParseError
from .models import DictionaryMetadata, FormatVersion

logger = logging.getLogger("stardex")

IFO_MAGIC = "StarDict's dict ifo file"

# .ifo key -> DictionaryMetadata field
TEXT_KEYS = {
    "bookname": "book_name",
    "author": "author",
    "email": "email",
    "website": "website",
    "description": "description",
    "date": "date",
    "sametypesequence": "same_type_sequence",
    "dicttype": "dict_type",
}

NUMERIC_KEYS = {
    "wordcount": "entry_count",
    "synwordcount": "synonym_count",
    "idxfilesize": "index_file_size",
    "idxoffsetbits": "index_offset_bits",
}


def _parse_count(key: str, value: str, path: Path | str | None) -> int:
    """Parse a non-negative decimal integer metadata value."""
    if not (value.isascii() and value.isdigit()):
        raise ParseError(
            f"Failed to parse ifo file {path}: {key}={value!r} is not a number",
            path=path,
            key=key,
            value=value,
        )
    return int(value)


def parse_metadata(text: str, path: Path | str | None = None) -> DictionaryMetadata:
    """
    Parse the text of an ``.ifo`` file.

    Args:
        text: Full file contents
        path: Source path, used for error messages only

    Returns:
        DictionaryMetadata with every recognized key populated

    Raises:
        ParseError: If a numeric key holds a non-numeric value
    """
    fields: dict[str, object] = {}
    version: str | None = None

    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if not sep:
            continue

        if key == "version":
            version = value
        elif key in TEXT_KEYS:
            fields[TEXT_KEYS[key]] = value
        elif key in NUMERIC_KEYS:
            fields[NUMERIC_KEYS[key]] = _parse_count(key, value, path)

    return DictionaryMetadata(
        format_version=FormatVersion.from_string(version),
        **fields,
    )


def read_metadata(path: Path | str) -> DictionaryMetadata:
    """
    Read and parse an ``.ifo`` metadata file.

    Args:
        path: Path to the ``.ifo`` file

    Returns:
        Parsed DictionaryMetadata. An unrecognized version yields
        ``FormatVersion.UNKNOWN``; rejecting it is left to the index reader.

    Raises:
        DictionaryIOError: If the file cannot be read
        ParseError: If the file is not UTF-8 or a numeric key is malformed
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DictionaryIOError(f"Failed to open ifo file {path}: {e}", path=path) from e

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"Failed to parse ifo file {path}: not UTF-8 text", path=path) from e

    metadata = parse_metadata(text, path)
    logger.debug(
        f"Read metadata from {path}: '{metadata.book_name}' "
        f"v{metadata.format_version.value}, {metadata.entry_count} words"
    )
    return metadata


def format_metadata(metadata: DictionaryMetadata) -> str:
    """
    Render metadata back into ``.ifo`` text.

    Empty descriptive fields and zero-valued optional counts are omitted;
    ``version``, ``bookname``, ``wordcount`` and ``idxfilesize`` are always
    written since StarDict readers require them.
    """
    lines = [IFO_MAGIC, f"version={metadata.format_version.value}"]
    lines.append(f"bookname={metadata.book_name}")
    lines.append(f"wordcount={metadata.entry_count}")
    if metadata.synonym_count:
        lines.append(f"synwordcount={metadata.synonym_count}")
    lines.append(f"idxfilesize={metadata.index_file_size}")
    if metadata.index_offset_bits:
        lines.append(f"idxoffsetbits={metadata.index_offset_bits}")

    for key, attr in TEXT_KEYS.items():
        if key == "bookname":
            continue
        value = getattr(metadata, attr)
        if value:
            lines.append(f"{key}={value}")

    return "\n".join(lines) + "\n"
