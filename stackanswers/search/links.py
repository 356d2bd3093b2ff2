import logging
import re
from typing import List, Optional

from ..config.settings import MarkerConfig, settings

logger = logging.getLogger(__name__)

class LinkExtractor:
    """Harvests candidate page URLs from a search results page, in document order"""

    def __init__(self, markers: Optional[MarkerConfig] = None):
        markers = markers or settings.config.markers
        self.result_marker = re.compile(markers.result_marker, re.IGNORECASE)
        self.anchor_href = re.compile(markers.anchor_href, re.IGNORECASE)
        self.href_delimiter = markers.href_delimiter

    def extract_links(self, html: str) -> List[str]:
        """
        Scan the results page marker by marker.

        Each result-title marker is followed by an anchor whose href embeds the
        destination. A marker without an anchor before the next marker is
        skipped, and the scan carries on from that marker.
        """
        links = []
        markers = list(self.result_marker.finditer(html))

        for i, marker in enumerate(markers):
            end = markers[i + 1].start() if i + 1 < len(markers) else len(html)
            anchor = self.anchor_href.search(html, marker.end(), end)
            if not anchor:
                logger.debug(f"No anchor after result marker at offset {marker.start()}")
                continue

            url = self.destination_from_href(anchor.group(1))
            if url:
                links.append(url)

        logger.debug(f"{len(links)} candidate links from {len(markers)} result markers")
        return links

    def destination_from_href(self, href: str) -> Optional[str]:
        """Pull the real destination out of a redirect href like ``/url?q=<dest>&sa=...``"""
        parts = href.split(self.href_delimiter)
        if len(parts) < 2:
            # Some results link straight to the page
            if href.startswith(('http://', 'https://')):
                return href
            return None

        destination = parts[1].split('&')[0]
        return destination or None
