# freestuff/utils/http.py
import json
import logging
from typing import Any, Optional

import httpx
from bs4 import BeautifulSoup

from freestuff.config import settings
from freestuff.errors import FetchError

logger = logging.getLogger(__name__)

class Fetcher:
    """GET-only HTTP helper shared by the scrapers.

    Every request carries the bot user agent. Network errors, non-2xx
    responses and undecodable JSON all surface as ``FetchError``; there is
    no retry here.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        user_agent: str = settings.USER_AGENT,
        timeout: float = settings.HTTP_TIMEOUT,
    ):
        self.client = client
        self.user_agent = user_agent
        self.timeout = timeout

    async def _get(self, url: str, params: Optional[dict] = None, headers: Optional[dict] = None) -> httpx.Response:
        hdrs = {"User-Agent": self.user_agent}
        if headers:
            hdrs.update(headers)
        try:
            if self.client is not None:
                r = await self.client.get(url, params=params, headers=hdrs, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    r = await client.get(url, params=params, headers=hdrs)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchError(url, str(e) or e.__class__.__name__) from e
        logger.debug("GET %s -> %s", r.url, r.status_code)
        return r

    async def fetch_text(self, url: str, params: Optional[dict] = None, headers: Optional[dict] = None) -> str:
        r = await self._get(url, params=params, headers=headers)
        return r.text

    async def fetch_html(self, url: str, params: Optional[dict] = None, headers: Optional[dict] = None) -> BeautifulSoup:
        html = await self.fetch_text(url, params=params, headers=headers)
        return BeautifulSoup(html, "html.parser")

    async def fetch_json(self, url: str, params: Optional[dict] = None, headers: Optional[dict] = None) -> Any:
        r = await self._get(url, params=params, headers=headers)
        try:
            return r.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise FetchError(url, "invalid JSON body") from e
