# freestuff/normalizer.py
from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from freestuff.config import settings
from freestuff.models import Category
from freestuff.schemas import ScrapedItem

# columns refreshed when a scrape re-discovers an existing natural key
MUTABLE_COLUMNS = (
    "description",
    "location_lat",
    "location_lng",
    "category",
    "available_until",
    "url",
    "time_details",
    "last_verified",
)

def local_midnight(d: date, tz: str = settings.LOCAL_TIMEZONE) -> datetime:
    """Anchor a date-only value at the start of that day in the local timezone."""
    return datetime.combine(d, time.min, tzinfo=ZoneInfo(tz))

def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=ZoneInfo(settings.LOCAL_TIMEZONE))
    return value.astimezone(timezone.utc)

def normalize(item: ScrapedItem, source: Optional[str] = None, now: Optional[datetime] = None) -> dict:
    snapshot = dict(
        title=item.title.strip(),
        description=item.description,
        location_lat=item.location_lat,
        location_lng=item.location_lng,
        category=item.category or Category.ITEMS,
        available_from=to_utc(item.available_from),
        available_until=to_utc(item.available_until),
        url=item.url,
        time_details=item.time_details,
        source=source or item.source or "",
        last_verified=now or datetime.now(timezone.utc),
    )
    return snapshot
