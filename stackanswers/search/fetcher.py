import asyncio
import httpx
import logging
from typing import Optional
from urllib.parse import urlparse
import time
from fake_useragent import UserAgent

from .models import FetchedPage
from ..config.settings import FetchConfig, SearchEngineConfig, settings

logger = logging.getLogger(__name__)

class PageFetcher:
    """Performs the HTTP GET requests of the pipeline (search page and candidate pages)"""

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        engine_config: Optional[SearchEngineConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or settings.config.fetch
        engine_config = engine_config or settings.config.search_engine
        self.timeout = httpx.Timeout(self.config.timeout)
        self.max_content_size = self.config.max_content_size
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        user_agent = engine_config.user_agent or UserAgent().random

        # Default headers to avoid bot detection
        self.default_headers = {
            'User-Agent': user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.9',
            'Accept-Encoding': 'gzip, deflate',
            'Connection': 'keep-alive',
            'Upgrade-Insecure-Requests': '1',
        }

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self.default_headers,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def fetch_content(self, url: str, retries: Optional[int] = None) -> Optional[FetchedPage]:
        """Fetch a URL with retry logic, returning None once every attempt has failed"""
        if retries is None:
            retries = self.config.max_retries

        for attempt in range(retries):
            try:
                return await self._fetch_with_httpx(url)

            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.warning(f"Attempt {attempt + 1} failed for {url}: {e}")
                if attempt == retries - 1:
                    logger.error(f"All attempts failed for {url}: {e}")
                    return None
                await asyncio.sleep(self.config.retry_delay)
        return None

    async def _fetch_with_httpx(self, url: str) -> FetchedPage:
        """Fetch content using httpx"""
        start_time = time.time()

        response = await self._get_client().get(url)
        response.raise_for_status()

        content = response.text
        if len(content) > self.max_content_size:
            content = content[:self.max_content_size]
            logger.warning(f"Content truncated for {url}")

        return FetchedPage(
            url=str(response.url),
            content=content,
            status=response.status_code,
            fetch_time=time.time() - start_time,
            headers=dict(response.headers),
        )

    def is_valid_url(self, url: str) -> bool:
        """Check that a URL has a scheme and a host"""
        try:
            parsed = urlparse(url)
            return bool(parsed.scheme and parsed.netloc)
        except ValueError:
            return False

    async def close(self):
        """Clean up resources"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
