"""
Definition payload (``.dict`` / ``.dict.dz``) storage.

The payload is read and decompressed in one go the first time it is needed
and then kept for the lifetime of the owning dictionary. Definitions are
served as byte ranges of the decompressed buffer.
"""

from __future__ import annotations

import gzip
import logging
import threading
import zlib
from pathlib import Path

from ..exceptions import DecodeError, DictionaryIOError

logger = logging.getLogger("stardex")

COMPRESSED_SUFFIXES = (".dz", ".gz")


def is_compressed_payload(path: Path | str) -> bool:
    """Decide from the file name whether a payload is gzip/dictzip compressed."""
    return Path(path).name.lower().endswith(COMPRESSED_SUFFIXES)


class PayloadStore:
    """Compute-once holder for a dictionary's decoded definition text.

    Construction does not touch the file. The first call to
    :meth:`materialize` reads it, gunzips it when ``compressed`` is set and
    validates it as UTF-8; later calls return the cached buffer. A lock
    guarantees that concurrent first calls decompress exactly once.

    Attributes:
        path: Payload file path
        compressed: Whether the file is gzip (dictzip) compressed
        decompress_count: Number of times the file was actually loaded
    """

    def __init__(self, path: Path | str, compressed: bool | None = None):
        """
        Args:
            path: Payload file path
            compressed: Force compressed/plain handling. Derived from the
                file extension when omitted.
        """
        self.path = Path(path)
        self.compressed = is_compressed_payload(self.path) if compressed is None else compressed
        self.decompress_count = 0
        self._data: bytes | None = None
        self._lock = threading.Lock()

    @property
    def is_materialized(self) -> bool:
        """Whether the payload has been loaded."""
        return self._data is not None

    def materialize(self) -> bytes:
        """
        Load the payload if needed and return the decoded buffer.

        Returns:
            The full payload as UTF-8 encoded bytes

        Raises:
            DictionaryIOError: If the file cannot be read
            DecodeError: If decompression fails or the content is not UTF-8
        """
        data = self._data
        if data is not None:
            return data

        with self._lock:
            if self._data is None:
                self._data = self._load()
                self.decompress_count += 1
            return self._data

    def _load(self) -> bytes:
        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise DictionaryIOError(f"Failed to open dict file {self.path}: {e}", path=self.path) from e

        if self.compressed:
            raw = self._decompress(raw)

        try:
            raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(
                f"Dict file {self.path} is not valid UTF-8 at byte {e.start}",
                path=self.path,
                details={"position": e.start},
            ) from e

        logger.debug(f"Materialized payload {self.path} ({len(raw)} bytes)")
        return raw

    def _decompress(self, raw: bytes) -> bytes:
        try:
            return gzip.decompress(raw)
        except (OSError, EOFError, zlib.error) as e:
            raise DecodeError(
                f"Failed to open dict file {self.path} as dz format: {e}",
                path=self.path,
            ) from e

    def __len__(self) -> int:
        """Byte length of the decoded payload (materializes it)."""
        return len(self.materialize())

    def slice(self, offset: int, length: int) -> str:
        """
        Return the definition stored at ``offset`` spanning ``length`` bytes.

        Only defined for ranges inside the payload; the engine drops index
        entries that point elsewhere at load time.

        Raises:
            ValueError: If the range falls outside the payload
        """
        data = self.materialize()
        end = offset + length
        if offset < 0 or length < 0 or end > len(data):
            raise ValueError(
                f"Range {offset}+{length} is outside payload of {len(data)} bytes"
            )
        return data[offset:end].decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        state = "materialized" if self.is_materialized else "deferred"
        return f"PayloadStore({str(self.path)!r}, compressed={self.compressed}, {state})"
