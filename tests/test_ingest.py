import asyncio
import unittest
from datetime import datetime, timezone

from sqlalchemy import text

from freestuff.models import Category
from freestuff.schemas import ScrapedItem
from support import DatabaseTestCase

START = datetime(2026, 11, 1, 17, 0, tzinfo=timezone.utc)


def _item(**overrides) -> ScrapedItem:
    fields = dict(
        title="Free couch",
        description="first description",
        category=Category.ITEMS,
        location_lat=37.76,
        location_lng=-122.42,
        available_from=START,
        url="https://example.org/1",
    )
    fields.update(overrides)
    return ScrapedItem(**fields)


class TestUpsert(DatabaseTestCase):
    async def test_same_natural_key_updates_single_row(self):
        self.assertTrue(await self.writer.upsert(_item(), source="test"))
        first = (await self.all_rows())[0]

        await asyncio.sleep(0.01)
        self.assertTrue(await self.writer.upsert(
            _item(description="second description", category=Category.FOOD, location_lat=37.8, url="https://example.org/2"),
            source="test",
        ))

        rows = await self.all_rows()
        self.assertEqual(len(rows), 1)
        row = rows[0]
        self.assertEqual(row.id, first.id)
        self.assertEqual(row.description, "second description")
        self.assertEqual(row.category, Category.FOOD)
        self.assertAlmostEqual(row.location_lat, 37.8)
        self.assertEqual(row.url, "https://example.org/2")
        self.assertGreater(row.last_verified, first.last_verified)

    async def test_different_source_is_a_different_listing(self):
        await self.writer.upsert(_item(), source="a")
        await self.writer.upsert(_item(), source="b")
        self.assertEqual(await self.count_rows(), 2)

    async def test_missing_source_stored_as_empty_string(self):
        await self.writer.upsert(_item())
        await self.writer.upsert(_item(description="again"))
        rows = await self.all_rows()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].source, "")
        self.assertEqual(rows[0].description, "again")

    async def test_insert_if_absent_keeps_first_copy(self):
        await self.writer.insert_if_absent(_item(), source="craigslist")
        self.assertTrue(await self.writer.insert_if_absent(_item(description="changed"), source="craigslist"))
        rows = await self.all_rows()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].description, "first description")

    async def test_save_returns_number_written(self):
        items = [_item(title=f"Thing {i}") for i in range(3)]
        self.assertEqual(await self.writer.save(items, source="test"), 3)
        self.assertEqual(await self.count_rows(), 3)

    async def test_list_listings_filters_by_source(self):
        await self.writer.upsert(_item(title="a"), source="one")
        await self.writer.upsert(_item(title="b"), source="two")
        listed = await self.writer.list_listings(source="two")
        self.assertEqual([l.title for l in listed], ["b"])


class TestBatchIsolation(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        async with self.engine.begin() as conn:
            await conn.execute(text(
                "CREATE TRIGGER reject_broken BEFORE INSERT ON free_items "
                "WHEN NEW.title = 'Broken chair' "
                "BEGIN SELECT RAISE(ABORT, 'rejected by test trigger'); END"
            ))

    async def test_one_bad_candidate_does_not_stop_the_batch(self):
        items = [_item(title="Free couch"), _item(title="Broken chair"), _item(title="Free lamp")]
        self.assertEqual(await self.writer.save(items, source="test"), 2)
        self.assertEqual(sorted(r.title for r in await self.all_rows()), ["Free couch", "Free lamp"])

    async def test_failed_upsert_reports_false(self):
        self.assertFalse(await self.writer.upsert(_item(title="Broken chair"), source="test"))
        self.assertTrue(await self.writer.upsert(_item(title="Free lamp"), source="test"))


class TestWriteFailures(DatabaseTestCase):
    create_tables = False

    async def test_failures_are_reported_not_raised(self):
        self.assertFalse(await self.writer.upsert(_item(), source="test"))
        self.assertEqual(await self.writer.save([_item(title="x"), _item(title="y")], source="test"), 0)


if __name__ == "__main__":
    unittest.main()
