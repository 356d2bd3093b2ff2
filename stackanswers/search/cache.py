import logging
from typing import Any, Dict, Optional

from .models import PageRecord

logger = logging.getLogger(__name__)

class ResultCache:
    """In-memory URL -> PageRecord store owned by a single search session"""

    def __init__(self):
        self._records: Dict[str, PageRecord] = {}
        self.hits = 0
        self.misses = 0

    def get(self, url: str) -> Optional[PageRecord]:
        """Return the cached record for a URL, or None"""
        record = self._records.get(url)
        if record is None:
            self.misses += 1
            logger.debug(f"Cache miss: {url}")
        else:
            self.hits += 1
            logger.debug(f"Cache hit: {url}")
        return record

    def put(self, url: str, record: PageRecord) -> None:
        """Store a record; a later write for the same URL replaces it"""
        self._records[url] = record
        logger.debug(f"Cache set: {url}")

    def clear(self) -> None:
        self._records.clear()
        self.hits = 0
        self.misses = 0
        logger.debug("Cache cleared")

    def __contains__(self, url: str) -> bool:
        return url in self._records

    def __len__(self) -> int:
        return len(self._records)

    def get_stats(self) -> Dict[str, Any]:
        """Statistics about the cache"""
        return {
            "size": len(self._records),
            "hits": self.hits,
            "misses": self.misses,
        }
