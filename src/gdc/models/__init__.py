"""gdc data models."""

from gdc.models.search_result import SearchResult
from gdc.models.snapshot import DirectorySnapshot

__all__ = [
    "DirectorySnapshot",
    "SearchResult",
]
