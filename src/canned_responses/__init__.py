from .models import CannedResponse, Diagnostic, extract_categories
from .parser import parse_canned_responses, slugify
from .library import ResponseLibrary
from .storage import JsonFileStore, LibraryStore, MemoryStore, STORAGE_KEY

__all__ = [
    "CannedResponse",
    "Diagnostic",
    "extract_categories",
    "parse_canned_responses",
    "slugify",
    "ResponseLibrary",
    "JsonFileStore",
    "LibraryStore",
    "MemoryStore",
    "STORAGE_KEY",
]
