"""
Data models for StarDict dictionaries.

These models describe the three on-disk parts of a dictionary (the ``.ifo``
metadata, the ``.idx`` headword index and the ``.dict`` payload) as they look
once loaded into memory.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums and Constants
# =============================================================================

class FormatVersion(str, Enum):
    """On-disk schema variant of a StarDict dictionary."""
    V2_4_2 = "2.4.2"
    V3_0_0 = "3.0.0"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str | None) -> "FormatVersion":
        """Map the literal ``version=`` value to a format version.

        Anything other than the two supported literals (including a missing
        value) maps to ``UNKNOWN``.
        """
        if value == cls.V2_4_2.value:
            return cls.V2_4_2
        if value == cls.V3_0_0.value:
            return cls.V3_0_0
        return cls.UNKNOWN

    @property
    def offset_width(self) -> int:
        """Byte width of the offset and length integers in the index."""
        if self is FormatVersion.V2_4_2:
            return 4
        if self is FormatVersion.V3_0_0:
            return 8
        raise ValueError("Unknown format version has no offset width")


# =============================================================================
# Metadata
# =============================================================================

class DictionaryMetadata(BaseModel):
    """Parsed contents of a ``.ifo`` file.

    Only ``format_version``, ``book_name`` and ``entry_count`` are interpreted;
    the descriptive fields are passed through verbatim.
    """
    model_config = ConfigDict(frozen=True)

    format_version: FormatVersion = Field(
        default=FormatVersion.UNKNOWN,
        description="Format version controlling the index integer width"
    )
    book_name: str = Field(default="", description="Display name of the dictionary")
    entry_count: int = Field(default=0, ge=0, description="Declared number of headwords (wordcount)")
    synonym_count: int = Field(default=0, ge=0, description="Declared number of synonyms (synwordcount)")
    index_file_size: int = Field(default=0, ge=0, description="Declared size of the .idx file in bytes")
    index_offset_bits: int = Field(default=0, ge=0, description="Declared offset width in bits (3.0.0 only)")
    author: str = ""
    email: str = ""
    website: str = ""
    description: str = ""
    date: str = ""
    same_type_sequence: str = ""
    dict_type: str = ""


# =============================================================================
# Index and lookup results
# =============================================================================

@dataclass(frozen=True)
class IndexEntry:
    """A single headword record from the ``.idx`` file.

    Attributes:
        headword: The lookup key
        offset: Byte offset of the definition in the decoded payload
        length: Byte length of the definition
    """
    headword: str
    offset: int
    length: int

    @property
    def end(self) -> int:
        """Byte position just past the definition."""
        return self.offset + self.length


@dataclass(frozen=True)
class DictEntry:
    """A resolved lookup hit: a headword and the definition it points to."""
    headword: str
    translation: str
