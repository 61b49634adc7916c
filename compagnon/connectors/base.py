"""Base connector — retry loop shared by outbound data sources."""

import asyncio
import logging
from abc import ABC, abstractmethod

import httpx

log = logging.getLogger(__name__)


class BaseConnector(ABC):
    def __init__(self, timeout: float = 20.0, max_retries: int = 2):
        self.timeout = timeout
        self.max_retries = max_retries

    async def search(self, *args, **kwargs):
        last_err = None
        for attempt in range(self.max_retries + 1):
            try:
                return await self._do_search(*args, **kwargs)
            except Exception as e:
                if isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500:
                    log.warning(f"{self.__class__.__name__} rejected with HTTP {e.response.status_code}, not retried")
                    raise  # a 4xx will not succeed on retry
                last_err = e
                if attempt < self.max_retries:
                    await asyncio.sleep(2**attempt)
                else:
                    log.warning(f"{self.__class__.__name__} failed after {attempt + 1} attempts: {e}")
        raise last_err  # propagate so the caller can report the failure

    @abstractmethod
    async def _do_search(self, *args, **kwargs):
        pass
