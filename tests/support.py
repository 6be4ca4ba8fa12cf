import os
import tempfile
import unittest

import httpx
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from freestuff.db import init_db
from freestuff.models import Listing
from freestuff.services.ingest import ListingWriter
from freestuff.utils.http import Fetcher


def mock_fetcher(handler) -> Fetcher:
    return Fetcher(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Fresh SQLite file database per test, with a writer bound to it."""

    create_tables = True

    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.engine = create_async_engine(f"sqlite+aiosqlite:///{os.path.join(self._tmp.name, 'test.db')}")
        if self.create_tables:
            await init_db(self.engine)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)
        self.writer = ListingWriter(self.session_factory)

    async def asyncTearDown(self):
        await self.engine.dispose()
        self._tmp.cleanup()

    async def count_rows(self) -> int:
        async with self.session_factory() as s:
            return (await s.execute(select(func.count()).select_from(Listing))).scalar_one()

    async def all_rows(self) -> list:
        async with self.session_factory() as s:
            return list((await s.execute(select(Listing).order_by(Listing.id))).scalars().all())
