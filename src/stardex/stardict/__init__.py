"""
StarDict dictionary format support.

This package provides:
- Readers for the ``.ifo`` metadata, ``.idx`` index and ``.dict`` payload files
- StarDict, the loaded dictionary with exact and fuzzy lookup
- Builders that write dictionaries from definitions or tab files
"""

from .models import DictEntry, DictionaryMetadata, FormatVersion, IndexEntry
from .metadata import read_metadata, parse_metadata, format_metadata
from .index import read_index, iter_index_records, encode_index, headword_sort_key, is_sorted, sort_entries
from .payload import PayloadStore
from .fuzzy import FuzzyIndex, FuzzyMatcher, FuzzyPolicy, edit_distance
from .engine import StarDict, DictionaryFiles, locate_files
from .builder import build_from_tabfile, parse_tabfile, write_stardict

__all__ = [
    # Models
    "DictEntry",
    "DictionaryMetadata",
    "FormatVersion",
    "IndexEntry",
    # Readers
    "read_metadata",
    "parse_metadata",
    "format_metadata",
    "read_index",
    "iter_index_records",
    "encode_index",
    "headword_sort_key",
    "sort_entries",
    "is_sorted",
    "PayloadStore",
    # Lookup
    "FuzzyIndex",
    "FuzzyMatcher",
    "FuzzyPolicy",
    "edit_distance",
    "StarDict",
    "DictionaryFiles",
    "locate_files",
    # Builders
    "build_from_tabfile",
    "parse_tabfile",
    "write_stardict",
]
