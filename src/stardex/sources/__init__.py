"""
Dictionary sources sharing one lookup interface.
"""

from .base import DictionarySource, LookupItem, LookupResult, ResultKind, SourceType
from .offline import StarDictSource
from .online import OnlineLookup, OnlineSource, Translation
from .notes import NotesSource

__all__ = [
    "DictionarySource",
    "LookupItem",
    "LookupResult",
    "ResultKind",
    "SourceType",
    "StarDictSource",
    "OnlineLookup",
    "OnlineSource",
    "Translation",
    "NotesSource",
]
