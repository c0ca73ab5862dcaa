import asyncio
import time
from typing import Optional

import httpx

from .config import MIN_REQUEST_INTERVAL, REQUEST_TIMEOUT, USER_AGENT
from .errors import TransportError
from .stats import RunStats


class ThreadFetcher:
    """
    One GET per URL, no retries. Every call lands in ``stats.calls`` before
    its outcome is checked, so failed calls are counted too.
    """

    def __init__(
        self,
        stats: Optional[RunStats] = None,
        *,
        log_callback=None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        min_interval: float = MIN_REQUEST_INTERVAL,
    ):
        self.stats = stats if stats is not None else RunStats()
        self._log = log_callback or (lambda msg, lvl="info": None)
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        }
        self.client = httpx.AsyncClient(
            headers=headers,
            timeout=REQUEST_TIMEOUT,
            follow_redirects=True,
            transport=transport,
        )
        self._last_request_time = 0.0
        self._min_interval = float(min_interval)

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def _rate_limit(self):
        if self._min_interval <= 0:
            return
        elapsed = time.time() - self._last_request_time
        if elapsed < self._min_interval:
            await asyncio.sleep(self._min_interval - elapsed)
        self._last_request_time = time.time()

    async def fetch(self, url: str) -> bytes:
        await self._rate_limit()
        self._log(f"GET {url}", "debug")
        try:
            resp = await self.client.get(url)
        except httpx.HTTPError as e:
            self.stats.record_call(url, None)
            raise TransportError(url, None, str(e) or type(e).__name__) from e

        self.stats.record_call(url, resp.status_code)
        if not resp.is_success:
            raise TransportError(url, resp.status_code, resp.reason_phrase)
        return resp.content
