# freestuff/scrapers/craigslist.py
from __future__ import annotations
import logging
from datetime import datetime
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from dateutil.parser import isoparse

from freestuff.config import settings
from freestuff.errors import FetchError
from freestuff.models import Category
from freestuff.scrapers.base import BaseScraper
from freestuff.schemas import ScrapedItem

logger = logging.getLogger(__name__)

class CraigslistScraper(BaseScraper):
    """Free-stuff search results from a classifieds site.

    Only neighborhood text is available, so nothing is geocoded. Rows are
    saved insert-if-absent: a repost with the same title and timestamp keeps
    the first copy.
    """

    source = "craigslist"
    conflict = "skip"

    def __init__(self, *args, url: str = settings.CRAIGSLIST_URL, **kwargs):
        super().__init__(*args, **kwargs)
        self.url = url

    async def scrape(self) -> List[ScrapedItem]:
        try:
            soup = await self.fetcher.fetch_html(self.url)
        except FetchError as e:
            logger.warning("[%s] %s", self.source, e)
            return []
        return self.parse(soup)

    def parse(self, soup: BeautifulSoup) -> List[ScrapedItem]:
        items: list[ScrapedItem] = []
        for row in soup.select(".result-info"):
            title_el = row.select_one(".result-title")
            title = title_el.get_text(" ", strip=True) if title_el else ""
            time_el = row.select_one("time")
            posted = _parse_timestamp(time_el.get("datetime") if time_el else None)
            # Skip if no title or date
            if not title or posted is None:
                continue

            hood_el = row.select_one(".result-hood")
            hood = hood_el.get_text(" ", strip=True).strip("() ") if hood_el else ""
            href = title_el.get("href") if title_el else None

            item = self.safe_item(
                title=title,
                description=hood or None,
                category=Category.ITEMS,
                available_from=posted,
                url=urljoin(self.url, href) if href else None,
            )
            if item:
                items.append(item)
        logger.info("[%s] parsed %d listings", self.source, len(items))
        return items


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return isoparse(value.strip())
    except (ValueError, OverflowError):
        return None
