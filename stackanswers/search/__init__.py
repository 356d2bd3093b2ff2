"""
Candidate retrieval and content extraction

This package contains every component of the pipeline:
- Fetch the search results page and each candidate page
- Harvest candidate links from the search results markup
- Extract question, answers and code snippets from a page
- Cache extracted pages per session
- Navigate the candidates with a rank-ordered cursor
"""

from .models import PageRecord, PageResult, ResultSink, ResultStatus, SessionState
from .fetcher import PageFetcher
from .links import LinkExtractor
from .extractor import ContentExtractor
from .cache import ResultCache
from .session import SearchSession

__all__ = [
    "PageRecord",
    "PageResult",
    "ResultSink",
    "ResultStatus",
    "SessionState",
    "PageFetcher",
    "LinkExtractor",
    "ContentExtractor",
    "ResultCache",
    "SearchSession",
]
