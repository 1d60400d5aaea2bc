import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from features.common.exceptions.marine_exceptions import UpstreamUnavailableError

logger = logging.getLogger(__name__)

class JsonHttpClient:
    """Shared aiohttp session handling for the upstream JSON APIs.

    Every request carries its own timeout; timeouts, transport errors, non-2xx
    statuses and undecodable bodies all surface as UpstreamUnavailableError.
    """

    source = "upstream"

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _init_session(self) -> aiohttp.ClientSession:
        if not self._session or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Accept": "application/json"}
            )
        return self._session

    async def close(self):
        if self._session:
            await self._session.close()
            self._session = None

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Any:
        session = await self._init_session()
        try:
            async with session.get(
                url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                response.raise_for_status()
                return await response.json(content_type=None)
        except asyncio.TimeoutError:
            logger.warning(f"{self.source} request timed out after {self.timeout}s: {url}")
            raise UpstreamUnavailableError(self.source, f"timeout after {self.timeout}s")
        except aiohttp.ClientResponseError as e:
            logger.error(f"{self.source} responded {e.status}: {url}")
            raise UpstreamUnavailableError(self.source, f"HTTP {e.status}")
        except aiohttp.ClientError as e:
            logger.error(f"Error fetching {url} from {self.source}: {str(e)}")
            raise UpstreamUnavailableError(self.source, str(e) or type(e).__name__)
        except ValueError as e:
            logger.error(f"{self.source} returned a body that is not JSON: {str(e)}")
            raise UpstreamUnavailableError(self.source, "invalid JSON body")
