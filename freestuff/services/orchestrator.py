# freestuff/services/orchestrator.py
import asyncio
import logging
from typing import List, Optional, Sequence

from freestuff.errors import RunInProgressError
from freestuff.schemas import SourceResult
from freestuff.scrapers.base import BaseScraper
from freestuff.scrapers.craigslist import CraigslistScraper
from freestuff.scrapers.eventbrite import EventbriteScraper
from freestuff.scrapers.funcheap import FunCheapScraper
from freestuff.scrapers.museums import MuseumScraper
from freestuff.services.ingest import ListingWriter
from freestuff.utils.http import Fetcher

logger = logging.getLogger(__name__)

def build_default_scrapers(fetcher: Optional[Fetcher] = None, writer: Optional[ListingWriter] = None) -> List[BaseScraper]:
    fetcher = fetcher or Fetcher()
    writer = writer or ListingWriter()
    return [
        CraigslistScraper(fetcher, writer),
        EventbriteScraper(fetcher, writer),
        FunCheapScraper(fetcher, writer),
        MuseumScraper(fetcher, writer),
    ]

class ScraperOrchestrator:
    def __init__(self, scrapers: Sequence[BaseScraper]):
        self.scrapers = list(scrapers)
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def run_all(self) -> List[SourceResult]:
        if self._lock.locked():
            raise RunInProgressError("a scrape run is already in progress")
        async with self._lock:
            results: list[SourceResult] = []
            for s in self.scrapers:
                results.append(await self._run_one(s))
            return results

    async def _run_one(self, scraper: BaseScraper) -> SourceResult:
        logger.info("running %s...", scraper.name)
        try:
            items = await scraper.scrape()
            await scraper.persist(items)
        except Exception:
            logger.exception("[scrape:%s] failed", scraper.name)
            return SourceResult(source=scraper.name, count=0)
        logger.info("[scrape:%s] %d items", scraper.name, len(items))
        return SourceResult(source=scraper.name, count=len(items))
