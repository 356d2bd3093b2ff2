import logging
from typing import Optional
from urllib.parse import quote, quote_plus

from ..config.settings import SearchEngineConfig, settings

logger = logging.getLogger(__name__)

class QueryBuilder:
    """Builds the search-engine request URL for a raw user query"""

    def __init__(self, config: Optional[SearchEngineConfig] = None):
        self.config = config or settings.config.search_engine

    def url_encode(self, query: str) -> str:
        """Encode the query payload for use in a URL"""
        return quote_plus(query.encode('utf-8'))

    def encode_site_filter(self) -> str:
        """Encode the site filter, keeping the ``site:`` colon literal"""
        return quote(self.config.site_filter, safe=':')

    def build_search_url(self, query: str) -> str:
        """
        Build the full search request URL.

        The site filter and the query are encoded separately and joined by
        an encoded space. The query is not validated: an empty query still
        produces a request.
        """
        url = f"{self.config.search_url}{self.encode_site_filter()}+{self.url_encode(query)}"
        logger.debug(f"Search URL for '{query}': {url}")
        return url
