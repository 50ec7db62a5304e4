"""Secondary search index collaborators."""

from .index import InMemorySearchIndex, SearchIndex

__all__ = ["SearchIndex", "InMemorySearchIndex"]
