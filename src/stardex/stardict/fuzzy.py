"""
Approximate headword matching by Levenshtein edit distance.

Two policies are supported:

- ``raw``: compare the lowercased query with every lowercased headword and
  keep every headword at the global minimum distance, however large.
- ``stripped``: drop punctuation, symbols and whitespace from both sides
  first and reject anything further than ``max_distance`` edits.

Distances are computed with Hyyrö's bit-parallel algorithm: the query is
turned into one bit mask per character, after which each headword character
costs a fixed handful of integer operations regardless of query length.
"""

import unicodedata
from enum import Enum
from typing import Iterator, Sequence

DEFAULT_MAX_DISTANCE = 3


class FuzzyPolicy(str, Enum):
    """How fuzzy lookup compares a query against headwords."""
    RAW = "raw"
    STRIPPED = "stripped"


def pattern_masks(pattern: str) -> dict[str, int]:
    """Bit mask of the positions of each character in ``pattern``."""
    masks: dict[str, int] = {}
    bit = 1
    for char in pattern:
        masks[char] = masks.get(char, 0) | bit
        bit <<= 1
    return masks


def bit_distance(masks: dict[str, int], length: int, text: str) -> int:
    """
    Levenshtein distance between a prepared pattern and ``text``.

    Args:
        masks: Output of :func:`pattern_masks` for the pattern
        length: Length of the pattern
        text: String to compare against

    Returns:
        The edit distance
    """
    if not length:
        return len(text)

    vp = (1 << length) - 1
    vn = 0
    last = 1 << (length - 1)
    distance = length
    get = masks.get

    for char in text:
        eq = get(char, 0)
        d0 = (((eq & vp) + vp) ^ vp) | eq | vn
        hp = vn | ~(d0 | vp)
        hn = d0 & vp
        if hp & last:
            distance += 1
        elif hn & last:
            distance -= 1
        hp = (hp << 1) | 1
        hn <<= 1
        vp = hn | ~(d0 | hp)
        vn = hp & d0

    return distance


def edit_distance(a: str, b: str, limit: int | None = None) -> int:
    """
    Levenshtein distance between two strings.

    Args:
        a: First string
        b: Second string
        limit: If given, any distance above ``limit`` is reported as
            ``limit + 1``

    Returns:
        The edit distance, or ``limit + 1`` if it exceeds ``limit``
    """
    if a == b:
        return 0
    if limit is not None and abs(len(a) - len(b)) > limit:
        return limit + 1
    if len(a) < len(b):
        a, b = b, a

    distance = bit_distance(pattern_masks(b), len(b), a)
    if limit is not None and distance > limit:
        return limit + 1
    return distance


def strip_punctuation(text: str) -> str:
    """Remove punctuation, symbols and whitespace."""
    return "".join(
        c for c in text
        if not c.isspace() and unicodedata.category(c)[0] not in "PSZ"
    )


class FuzzyIndex:
    """Normalized headwords, grouped by length.

    Behaves as a read-only sequence of the keys in their original order.
    Identical keys share one slot per length bucket, so each distinct key is
    compared once per query.
    """

    def __init__(self, keys: Sequence[str]):
        self._keys = list(keys)
        self._buckets: dict[int, dict[str, list[int]]] = {}
        for i, key in enumerate(self._keys):
            if key:
                self._buckets.setdefault(len(key), {}).setdefault(key, []).append(i)
        self.max_length = max(self._buckets, default=0)

    def bucket(self, length: int) -> dict[str, list[int]]:
        """Distinct keys of the given length, mapped to their positions."""
        return self._buckets.get(length, {})

    def __len__(self) -> int:
        return len(self._keys)

    def __getitem__(self, position: int) -> str:
        return self._keys[position]

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)


class FuzzyMatcher:
    """Finds the headwords closest to a query under a given policy.

    Example:
        >>> matcher = FuzzyMatcher()
        >>> keys = matcher.prepare(["Cargo", "crate", "rust"])
        >>> matcher.best_matches("rst", keys)
        [2]
    """

    def __init__(
        self,
        policy: FuzzyPolicy | str = FuzzyPolicy.RAW,
        max_distance: int = DEFAULT_MAX_DISTANCE,
    ):
        self.policy = FuzzyPolicy(policy)
        if max_distance < 0:
            raise ValueError("max_distance must be non-negative")
        self.max_distance = max_distance

    def normalize(self, text: str) -> str:
        """Comparison form of a query or headword."""
        text = text.lower()
        if self.policy is FuzzyPolicy.STRIPPED:
            text = strip_punctuation(text)
        return text

    def prepare(self, headwords: Sequence[str]) -> FuzzyIndex:
        """Normalize headwords once so repeated queries can reuse them."""
        return FuzzyIndex([self.normalize(word) for word in headwords])

    def best_matches(self, query: str, candidates: Sequence[str]) -> list[int] | None:
        """
        Indices of the prepared candidates at minimum distance from ``query``.

        Length buckets are scanned outward from the query's length; a bucket
        whose length differs by more than the best distance so far cannot
        hold a closer key, which ends the scan. Empty candidates are never
        matched. Ties are all returned, in candidate order.

        Args:
            query: Raw query text (normalized here)
            candidates: Output of :meth:`prepare`, or plain normalized keys

        Returns:
            Matching indices, or None when no candidate qualifies
        """
        index = candidates if isinstance(candidates, FuzzyIndex) else FuzzyIndex(candidates)
        query = self.normalize(query)
        size = len(query)
        masks = pattern_masks(query)

        best = self.max_distance if self.policy is FuzzyPolicy.STRIPPED else None
        matches: list[int] = []

        for delta in range(max(size, index.max_length) + 1):
            if best is not None and delta > best:
                break
            lengths = (size - delta, size + delta) if delta else (size,)
            for length in lengths:
                for key, positions in index.bucket(length).items():
                    distance = bit_distance(masks, size, key)
                    if best is not None and distance > best:
                        continue
                    if best is None or distance < best:
                        best = distance
                        matches = list(positions)
                    else:
                        matches.extend(positions)

        return sorted(matches) or None

    def __repr__(self) -> str:
        return f"FuzzyMatcher(policy={self.policy.value!r}, max_distance={self.max_distance})"
