# freestuff/scrapers/base.py
import logging
from typing import List, Optional

from pydantic import ValidationError

from freestuff.schemas import ScrapedItem
from freestuff.services.ingest import ConflictStrategy, ListingWriter
from freestuff.utils.http import Fetcher

logger = logging.getLogger(__name__)

class BaseScraper:
    source = "base"
    conflict: ConflictStrategy = "merge"

    def __init__(self, fetcher: Optional[Fetcher] = None, writer: Optional[ListingWriter] = None):
        self.fetcher = fetcher or Fetcher()
        self.writer = writer or ListingWriter()

    @property
    def name(self) -> str:
        return self.source

    async def scrape(self) -> List[ScrapedItem]:
        raise NotImplementedError

    async def persist(self, items: List[ScrapedItem]) -> int:
        return await self.writer.save(items, source=self.source, conflict=self.conflict)

    def safe_item(self, **fields) -> Optional[ScrapedItem]:
        fields.setdefault("source", self.source)
        try:
            return ScrapedItem(**fields)
        except ValidationError as e:
            logger.debug("[%s] dropping %r: %s", self.source, fields.get("title"), e)
            return None
