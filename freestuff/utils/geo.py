# freestuff/utils/geo.py
import asyncio
import logging
import time
from typing import NamedTuple, Optional

from freestuff.config import settings
from freestuff.errors import FetchError
from freestuff.utils.http import Fetcher

logger = logging.getLogger(__name__)

class Coordinates(NamedTuple):
    lat: float
    lng: float

class Throttle:
    """Cooperative limiter: at most one call per ``min_interval`` seconds."""

    def __init__(self, min_interval: float = settings.GEOCODE_MIN_INTERVAL):
        self.min_interval = min_interval
        self._last: Optional[float] = None
        self._lock = asyncio.Lock()

    async def wait(self):
        async with self._lock:
            if self._last is not None:
                elapsed = time.monotonic() - self._last
                if elapsed < self.min_interval:
                    await asyncio.sleep(self.min_interval - elapsed)
            self._last = time.monotonic()

class Geocoder:
    """Forward geocoding against a Nominatim-compatible search endpoint.

    One request per call; rate limiting is up to the caller (see ``Throttle``).
    Failures come back as ``None`` so a listing is never lost to a geocoding
    problem alone.
    """

    def __init__(self, fetcher: Fetcher, url: str = settings.GEOCODER_URL, region: Optional[str] = settings.GEOCODE_REGION):
        self.fetcher = fetcher
        self.url = url
        self.region = region

    def _query(self, address: str) -> str:
        address = " ".join(address.split())
        if self.region and self.region.lower() not in address.lower():
            return f"{address}, {self.region}"
        return address

    async def geocode(self, address: Optional[str]) -> Optional[Coordinates]:
        if not address or not address.strip():
            return None
        q = self._query(address)
        try:
            data = await self.fetcher.fetch_json(self.url, params={"q": q, "format": "json", "limit": 1})
        except FetchError as e:
            logger.warning("geocoding failed for %r: %s", q, e)
            return None
        if not isinstance(data, list) or not data:
            logger.debug("no geocoding match for %r", q)
            return None
        hit = data[0]
        try:
            return Coordinates(float(hit["lat"]), float(hit["lon"]))
        except (KeyError, TypeError, ValueError):
            logger.warning("malformed geocoding result for %r: %r", q, hit)
            return None
