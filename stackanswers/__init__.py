"""
stackanswers - answers and code snippets from Q&A pages for a coding query

The package searches a question-and-answer site, extracts the question, its
answers and their code snippets from each candidate page, and lets a caller
page through the candidates with a cached cursor.

Main components:
- search: fetching, link and content extraction, cache and session
- utils: query building and text formatting
- config: centralized configuration
"""

__version__ = "1.0.0"
__author__ = "stackanswers contributors"

# Main imports for convenience
from .search import SearchSession, PageFetcher, PageRecord

__all__ = [
    "SearchSession",
    "PageFetcher",
    "PageRecord",
    "__version__",
]
