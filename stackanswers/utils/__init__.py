"""
Helpers around the search pipeline

This package contains:
- QueryBuilder: builds the search-engine request URL for a query
- ResultFormatter: plain-text rendering of extracted pages
"""

from .query_builder import QueryBuilder
from .formatter import ResultFormatter

__all__ = [
    "QueryBuilder",
    "ResultFormatter",
]
