"""
Pytest configuration and fixtures for stardex tests.
"""

import gzip
import struct
import sys
from pathlib import Path

import pytest

# Add src directory to Python path to allow importing stardex
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from stardex.stardict.builder import write_stardict  # noqa: E402


RUST_TRANSLATION = "n. 铁锈, 生锈\nv. (使)生锈"

REFERENCE_WORDS = [
    ("rust", RUST_TRANSLATION),
    ("cargo", "n. 货物"),
    ("crate", "n. 板条箱"),
    ("trust", "n. 信任"),
    ("apple", "n. 苹果"),
    ("ice cream", "n. 冰淇淋"),
]


@pytest.fixture
def reference_dir(tmp_path: Path) -> Path:
    """A small compressed 2.4.2 dictionary containing "rust"."""
    directory = tmp_path / "cdict-gb"
    write_stardict(directory, "CDICT5英汉辞典", REFERENCE_WORDS, basename="cdict-gb", compress=True)
    return directory


@pytest.fixture
def make_dictionary(tmp_path: Path):
    """Factory writing a dictionary from (headword, definition) pairs via the builder."""

    def _make(name: str, words: list[tuple[str, str]], **options) -> Path:
        directory = tmp_path / name
        write_stardict(directory, name, words, **options)
        return directory

    return _make


@pytest.fixture
def make_raw_dictionary(tmp_path: Path):
    """Factory assembling dictionary files byte by byte.

    ``records`` are (headword, offset, length) with the headword given as
    str or raw bytes, written in the given order.
    """

    def _make(
        name: str,
        records: list[tuple[str | bytes, int, int]],
        payload: bytes,
        version: str = "2.4.2",
        wordcount: int | None = None,
        compress: bool = False,
    ) -> Path:
        directory = tmp_path / name
        directory.mkdir(parents=True)

        fmt = ">QQ" if version == "3.0.0" else ">II"
        index = bytearray()
        for headword, offset, length in records:
            raw = headword if isinstance(headword, bytes) else headword.encode("utf-8")
            index += raw + b"\0" + struct.pack(fmt, offset, length)

        count = len(records) if wordcount is None else wordcount
        (directory / f"{name}.ifo").write_text(
            "StarDict's dict ifo file\n"
            f"version={version}\n"
            f"bookname={name}\n"
            f"wordcount={count}\n"
            f"idxfilesize={len(index)}\n"
            "sametypesequence=m\n",
            encoding="utf-8",
        )
        (directory / f"{name}.idx").write_bytes(bytes(index))
        if compress:
            (directory / f"{name}.dict.dz").write_bytes(gzip.compress(payload))
        else:
            (directory / f"{name}.dict").write_bytes(payload)
        return directory

    return _make
