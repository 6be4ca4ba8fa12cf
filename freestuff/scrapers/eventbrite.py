# freestuff/scrapers/eventbrite.py
from __future__ import annotations
import logging
from typing import Any, List, Optional

from freestuff.config import settings
from freestuff.errors import FetchError
from freestuff.models import Category
from freestuff.scrapers.base import BaseScraper
from freestuff.schemas import ScrapedItem

logger = logging.getLogger(__name__)

# guard against a misbehaving continuation cursor
MAX_PAGES = 20

class EventbriteScraper(BaseScraper):
    source = "eventbrite"

    def __init__(
        self,
        *args,
        api_key: Optional[str] = settings.EVENTBRITE_API_KEY,
        base_url: str = settings.EVENTBRITE_BASE_URL,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    @property
    def _auth(self) -> dict:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def scrape(self) -> List[ScrapedItem]:
        if not self.api_key:
            logger.warning("[%s] EVENTBRITE_API_KEY not configured, skipping", self.source)
            return []
        try:
            org_id = await self._organization_id()
            if org_id is None:
                logger.warning("[%s] token has no organizations", self.source)
                return []
            events = await self._events(org_id)
        except FetchError as e:
            logger.warning("[%s] %s", self.source, e)
            return []

        items: list[ScrapedItem] = []
        for ev in events:
            if not ev.get("is_free"):
                continue
            item = self._to_item(ev)
            if item:
                items.append(item)
        logger.info("[%s] %d free events out of %d", self.source, len(items), len(events))
        return items

    async def _organization_id(self) -> Optional[str]:
        data = await self.fetcher.fetch_json(f"{self.base_url}/users/me/organizations/", headers=self._auth)
        orgs = (data or {}).get("organizations") or []
        org_id = orgs[0].get("id") if orgs and isinstance(orgs[0], dict) else None
        return str(org_id) if org_id is not None else None

    async def _events(self, org_id: str) -> list[dict[str, Any]]:
        url = f"{self.base_url}/organizations/{org_id}/events/"
        params: dict[str, Any] = {"status": "live", "order_by": "start_asc", "expand": "venue"}
        events: list[dict[str, Any]] = []
        for _ in range(MAX_PAGES):
            data = await self.fetcher.fetch_json(url, params=params, headers=self._auth) or {}
            events.extend(e for e in data.get("events") or [] if isinstance(e, dict))
            page = data.get("pagination") or {}
            if not page.get("has_more_items") or not page.get("continuation"):
                break
            params = {**params, "continuation": page["continuation"]}
        return events

    def _to_item(self, ev: dict[str, Any]) -> Optional[ScrapedItem]:
        venue = ev.get("venue") or {}
        start = _deep_get(ev, "start.utc")
        if not start:
            return None
        return self.safe_item(
            title=_deep_get(ev, "name.text") or "",
            description=_deep_get(ev, "description.text"),
            location_lat=venue.get("latitude"),
            location_lng=venue.get("longitude"),
            category=Category.EVENTS,
            available_from=start,
            available_until=_deep_get(ev, "end.utc"),
            url=ev.get("url"),
        )


def _deep_get(d: dict, path: str):
    cur: Any = d
    for part in path.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        else:
            return None
    return cur
