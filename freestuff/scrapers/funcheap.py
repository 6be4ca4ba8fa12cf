# freestuff/scrapers/funcheap.py
from __future__ import annotations
import logging
import re
from datetime import datetime
from typing import List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from dateutil import parser as dateparser

from freestuff.config import settings
from freestuff.errors import FetchError
from freestuff.models import Category
from freestuff.scrapers.base import BaseScraper
from freestuff.schemas import ScrapedItem
from freestuff.utils.geo import Geocoder, Throttle

logger = logging.getLogger(__name__)

RANGE_SEP_RE = re.compile(r"\s+(?:-|–|—|to)\s+", re.IGNORECASE)

class FunCheapScraper(BaseScraper):
    """Free events from a local events aggregator.

    Coordinates are mandatory here: an entry whose venue text does not
    geocode is dropped along with entries lacking a title or a date.
    """

    source = "funcheap"

    def __init__(
        self,
        *args,
        url: str = settings.FUNCHEAP_URL,
        geocoder: Optional[Geocoder] = None,
        throttle: Optional[Throttle] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.url = url
        self.geocoder = geocoder or Geocoder(self.fetcher)
        self.throttle = throttle or Throttle()

    async def scrape(self) -> List[ScrapedItem]:
        try:
            soup = await self.fetcher.fetch_html(self.url)
        except FetchError as e:
            logger.warning("[%s] %s", self.source, e)
            return []
        return await self.parse(soup)

    async def parse(self, soup: BeautifulSoup) -> List[ScrapedItem]:
        items: list[ScrapedItem] = []
        entries = soup.select(".entry")
        for entry in entries:
            try:
                item = await self._parse_entry(entry)
            except (ValueError, TypeError) as e:
                logger.warning("[%s] skipping malformed entry: %s", self.source, e)
                continue
            if item:
                items.append(item)
        logger.info("[%s] kept %d of %d entries", self.source, len(items), len(entries))
        return items

    async def _parse_entry(self, entry: Tag) -> Optional[ScrapedItem]:
        link = entry.select_one(".title a")
        title = link.get_text(" ", strip=True) if link else ""
        if not title:
            return None

        when_el = entry.select_one(".when")
        date_text = " ".join(when_el.get_text(" ", strip=True).split()) if when_el else ""
        start, end = parse_when(date_text)
        if start is None:
            logger.debug("[%s] unparsable date %r for %r", self.source, date_text, title)
            return None

        where_el = entry.select_one(".where")
        location = where_el.get_text(" ", strip=True) if where_el else ""
        if not location:
            return None
        await self.throttle.wait()
        coords = await self.geocoder.geocode(location)
        if coords is None:
            logger.debug("[%s] could not place %r at %r", self.source, title, location)
            return None

        desc_el = entry.select_one(".entry-content p")
        href = link.get("href")
        return self.safe_item(
            title=title,
            description=desc_el.get_text(" ", strip=True) if desc_el else None,
            location_lat=coords.lat,
            location_lng=coords.lng,
            category=Category.EVENTS,
            available_from=start,
            available_until=end,
            url=urljoin(self.url, href) if href else None,
            time_details=date_text,
        )


def _split_range(text: str) -> Tuple[str, str]:
    parts = RANGE_SEP_RE.split(text.strip(), maxsplit=1)
    if len(parts) == 2:
        return parts[0].strip(), parts[1].strip()
    return parts[0].strip(), ""

def _parse(text: str, default: Optional[datetime] = None) -> Optional[datetime]:
    text = text.strip()
    if not text:
        return None
    try:
        return dateparser.parse(text, fuzzy=True, default=default)
    except (ValueError, OverflowError):
        return None

def _same_awareness(start: datetime, end: datetime) -> Tuple[datetime, datetime]:
    # a zone written on one side of a range ("10:00 am - 2:00 pm UTC") covers both
    if start.tzinfo is None and end.tzinfo is not None:
        start = start.replace(tzinfo=end.tzinfo)
    elif end.tzinfo is None and start.tzinfo is not None:
        end = end.replace(tzinfo=start.tzinfo)
    return start, end

def parse_when(text: str, today: Optional[datetime] = None) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Parse listings like ``Saturday, May 4, 2024 | 10:00 am - 2:00 pm``.

    Returns (start, end); end falls back to start when there is no range.
    """
    if not text or not text.strip():
        return None, None
    default = (today or datetime.now()).replace(hour=0, minute=0, second=0, microsecond=0)
    day_part, _, time_part = text.partition("|")
    start_day, end_day = _split_range(day_part)
    start_time, end_time = _split_range(time_part)

    start = _parse(f"{start_day} {start_time}", default)
    if start is None:
        return None, None
    end = None
    if end_day:
        end = _parse(f"{end_day} {end_time}", start.replace(hour=0, minute=0))
    elif end_time:
        end = _parse(end_time, start)
    if end is not None:
        start, end = _same_awareness(start, end)
    if end is None or end < start:
        end = start
    return start, end
