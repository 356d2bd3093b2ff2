import asyncio
import logging
from typing import List, Optional

from .cache import ResultCache
from .extractor import ContentExtractor
from .fetcher import PageFetcher
from .links import LinkExtractor
from .models import PageRecord, PageResult, ResultSink, ResultStatus, SessionState
from ..config.settings import SessionConfig, settings
from ..utils.query_builder import QueryBuilder

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "not found"
RETRIEVAL_FAILED_MESSAGE = "retrieval failed"
NOT_AVAILABLE_MESSAGE = "not available"

class SearchSession:
    """
    Rank-ordered cursor over the candidate pages of one query at a time.

    Every ``submit`` starts a new epoch with its own lock. Navigation queues on
    the lock of the epoch it was issued in, so page fetches of one query never
    overlap, and any response that completes after its epoch was superseded
    is dropped without touching the session.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        config: Optional[SessionConfig] = None,
        sink: Optional[ResultSink] = None,
        query_builder: Optional[QueryBuilder] = None,
        link_extractor: Optional[LinkExtractor] = None,
        extractor: Optional[ContentExtractor] = None,
    ):
        self.fetcher = fetcher
        self.config = config or settings.config.session
        self.sink = sink
        self.query_builder = query_builder or QueryBuilder()
        self.link_extractor = link_extractor or LinkExtractor()
        self.extractor = extractor or ContentExtractor()

        self.query: Optional[str] = None
        self.candidates: List[str] = []
        self.cursor = 0
        self.cache = ResultCache()
        self.state = SessionState.IDLE

        self._epoch = 0
        self._lock = asyncio.Lock()

    @property
    def max_index(self) -> int:
        """Highest reachable cursor position for the current candidates"""
        return min(len(self.candidates) - 1, self.config.max_cursor)

    @property
    def current_url(self) -> Optional[str]:
        if not self.candidates:
            return None
        return self.candidates[self.cursor]

    async def submit(self, query: str) -> PageResult:
        """Start a new query: reset cursor, cache and candidates, then resolve the first page"""
        self._epoch += 1
        epoch = self._epoch
        self._lock = asyncio.Lock()

        self.query = query
        self.candidates = []
        self.cursor = 0
        self.cache.clear()
        self.state = SessionState.SEARCHING

        logger.info(f"Searching: '{query}'")

        async with self._lock:
            page = await self.fetcher.fetch_content(self.query_builder.build_search_url(query))
            if epoch != self._epoch:
                return self._stale(query)

            if page is None:
                self.state = SessionState.IDLE
                return self._unavailable(ResultStatus.FAILED, RETRIEVAL_FAILED_MESSAGE)

            candidates = self.link_extractor.extract_links(page.content)
            if not candidates:
                logger.warning(f"No results found for: {query}")
                self.state = SessionState.NOT_FOUND
                return self._unavailable(ResultStatus.NOT_FOUND, NOT_FOUND_MESSAGE)

            logger.info(f"{len(candidates)} candidates for: {query}")
            self.candidates = candidates
            self.state = SessionState.READY
            return await self._resolve(0, epoch)

    async def advance(self) -> PageResult:
        """Move to the next candidate, clamped to the last reachable one"""
        return await self._navigate(1)

    async def retreat(self) -> PageResult:
        """Move to the previous candidate, clamped to the first one"""
        return await self._navigate(-1)

    async def _navigate(self, step: int) -> PageResult:
        epoch = self._epoch
        async with self._lock:
            if epoch != self._epoch:
                return self._stale(self.query)

            if not self.candidates:
                return self._unavailable(ResultStatus.UNAVAILABLE, NOT_AVAILABLE_MESSAGE)

            index = max(0, min(self.cursor + step, self.max_index))
            return await self._resolve(index, epoch)

    async def _resolve(self, index: int, epoch: int) -> PageResult:
        """Deliver the page at ``index`` from the cache, or fetch, extract and cache it"""
        url = self.candidates[index]

        record = self.cache.get(url)
        if record is not None:
            self.cursor = index
            return self._deliver(url, index, record, from_cache=True)

        if not self.fetcher.is_valid_url(url):
            logger.warning(f"Skipping invalid candidate URL: {url}")
            return self._unavailable(ResultStatus.FAILED, RETRIEVAL_FAILED_MESSAGE, url=url, index=index)

        self.state = SessionState.FETCHING_PAGE
        page = await self.fetcher.fetch_content(url)
        if epoch != self._epoch:
            return self._stale(url)

        self.state = SessionState.READY
        if page is None:
            return self._unavailable(ResultStatus.FAILED, RETRIEVAL_FAILED_MESSAGE, url=url, index=index)

        record = self.extractor.extract(page.content, include_question=self.config.include_question)
        self.cache.put(url, record)
        self.cursor = index
        return self._deliver(url, index, record, from_cache=False)

    def current_record(self) -> Optional[PageRecord]:
        """Cached record under the cursor, never triggering a fetch"""
        url = self.current_url
        if url is None or url not in self.cache:
            return None
        return self.cache.get(url)

    def peek(self) -> PageResult:
        record = self.current_record()
        if record is None:
            return PageResult(status=ResultStatus.UNAVAILABLE, url=self.current_url, message=NOT_AVAILABLE_MESSAGE)
        return PageResult(
            status=ResultStatus.OK,
            url=self.current_url,
            index=self.cursor,
            record=record,
            from_cache=True,
        )

    def _deliver(self, url: str, index: int, record: PageRecord, from_cache: bool) -> PageResult:
        if self.sink:
            self.sink.deliver(record.question or "", list(record.answers), list(record.snippets))
        return PageResult(status=ResultStatus.OK, url=url, index=index, record=record, from_cache=from_cache)

    def _unavailable(self, status: ResultStatus, message: str, url: Optional[str] = None,
                     index: Optional[int] = None) -> PageResult:
        if self.sink:
            self.sink.unavailable(message)
        return PageResult(status=status, url=url, index=index, message=message)

    def _stale(self, what: Optional[str]) -> PageResult:
        logger.debug(f"Discarding stale response for: {what}")
        return PageResult(status=ResultStatus.STALE, message="superseded by a newer query")
