# freestuff/services/ingest.py
import logging
from typing import Iterable, List, Literal, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from freestuff.db import SessionLocal
from freestuff.models import Listing
from freestuff.normalizer import MUTABLE_COLUMNS, normalize
from freestuff.schemas import ScrapedItem

logger = logging.getLogger(__name__)

NATURAL_KEY = ("title", "available_from", "source")

ConflictStrategy = Literal["merge", "skip"]

def _insert_for(session: AsyncSession):
    dialect = session.bind.dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"no upsert support for dialect {dialect!r}")

class ListingWriter:
    """Writes scraped candidates into ``free_items``.

    ``upsert`` refreshes the mutable columns of an existing row with the same
    (title, available_from, source); ``insert_if_absent`` leaves an existing
    row untouched. Both commit per candidate and report failure instead of
    raising, so one bad record never sinks the rest of a batch.
    """

    def __init__(self, session_factory: async_sessionmaker = SessionLocal):
        self.session_factory = session_factory

    async def upsert(self, item: ScrapedItem, source: Optional[str] = None) -> bool:
        return await self._write(item, source, "merge")

    async def insert_if_absent(self, item: ScrapedItem, source: Optional[str] = None) -> bool:
        return await self._write(item, source, "skip")

    async def _write(self, item: ScrapedItem, source: Optional[str], conflict: ConflictStrategy) -> bool:
        snap = normalize(item, source)
        try:
            async with self.session_factory() as s:
                stmt = _insert_for(s)(Listing).values(**snap)
                if conflict == "merge":
                    stmt = stmt.on_conflict_do_update(
                        index_elements=list(NATURAL_KEY),
                        set_={col: getattr(stmt.excluded, col) for col in MUTABLE_COLUMNS},
                    )
                else:
                    stmt = stmt.on_conflict_do_nothing(index_elements=list(NATURAL_KEY))
                await s.execute(stmt)
                await s.commit()
        except SQLAlchemyError as e:
            logger.error("error saving %r from %s: %s", snap["title"], snap["source"] or "<none>", e)
            return False
        logger.debug("saved %r (%s)", snap["title"], snap["source"])
        return True

    async def save(self, items: Iterable[ScrapedItem], source: Optional[str] = None, conflict: ConflictStrategy = "merge") -> int:
        items = list(items)
        logger.info("saving %d items from %s (%s)", len(items), source or "<none>", conflict)
        saved = 0
        for item in items:
            if await self._write(item, source, conflict):
                saved += 1
        return saved

    async def list_listings(self, source: Optional[str] = None) -> List[Listing]:
        q = select(Listing).order_by(Listing.available_from.desc())
        if source is not None:
            q = q.where(Listing.source == source)
        async with self.session_factory() as s:
            res = await s.execute(q)
            return list(res.scalars().all())
