import aiohttp
import asyncio
import json
import logging
from typing import Dict, Any, Optional

from interfaces.castr_interface import ICastrClient
from services.connection_status import ConnectionStatus, ConnectionStatusTracker

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://api.castr.com/v2/'
STREAMS_ENDPOINT = 'live_streams'

class CastrError(Exception):
    """Base class for every failure raised by the sync engine"""

class CastrTransportError(CastrError):
    """Network level failure (DNS, timeout, connection reset)"""

class CastrAPIError(CastrError):
    """Remote API answered with a non-success status"""

    def __init__(self, status: int, reason: str):
        self.status = status
        self.reason = reason
        super().__init__(reason or f"HTTP {status}")

class CastrAuthError(CastrAPIError):
    """Remote API rejected the credentials (HTTP 401)"""

class CastrClient(ICastrClient):
    """Thin aiohttp wrapper around the Castr v2 REST API"""

    def __init__(self, access_token: str, secret_key: str,
                 api_url: str = DEFAULT_API_URL,
                 status_tracker: Optional[ConnectionStatusTracker] = None,
                 timeout: float = 30):
        self.api_url = api_url or DEFAULT_API_URL
        self.auth = aiohttp.BasicAuth(access_token or '', secret_key or '')
        self.status_tracker = status_tracker or ConnectionStatusTracker()
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.headers = {
            'Accept': 'application/json',
            'Content-Type': 'application/json'
        }

    def build_url(self, endpoint: str, path_suffix: Optional[str] = None) -> str:
        url = self.api_url + endpoint
        if path_suffix:
            url = f"{url}/{path_suffix}"
        return url

    async def call(self, method: str, endpoint: str,
                   path_suffix: Optional[str] = None,
                   body: Optional[Dict[str, Any]] = None) -> Any:
        """Perform an authenticated call and return the decoded JSON body"""
        url = self.build_url(endpoint, path_suffix)
        data = json.dumps(body) if body is not None else None
        logger.debug(f"Calling {method} {url}" + (f" with body {data}" if data else ""))

        try:
            async with aiohttp.ClientSession(headers=self.headers, timeout=self.timeout) as session:
                async with session.request(method, url, data=data, auth=self.auth) as response:
                    if response.status == 401:
                        self.status_tracker.update(ConnectionStatus.AUTHENTICATION_FAILURE, response.reason)
                        logger.error(f"API Authorization failed: {response.status} {response.reason}")
                        raise CastrAuthError(response.status, response.reason)

                    if response.status >= 400:
                        self.status_tracker.update(ConnectionStatus.UNKNOWN_ERROR, response.reason)
                        logger.error(f"API Error: {response.status} {response.reason}")
                        raise CastrAPIError(response.status, response.reason)

                    logger.debug(f"API Response: {response.status} {response.reason} for {method} {url}")
                    try:
                        return await response.json(content_type=None)
                    except ValueError as e:
                        self.status_tracker.update(ConnectionStatus.UNKNOWN_ERROR, "Invalid JSON response")
                        logger.error(f"API returned invalid JSON for {method} {url}: {e}")
                        raise CastrAPIError(response.status, "Invalid JSON response") from e

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Request {method} {url} failed: {type(e).__name__}: {e}")
            raise CastrTransportError(str(e) or type(e).__name__) from e

    async def list_streams(self) -> Dict[str, Any]:
        return await self.call('GET', STREAMS_ENDPOINT)

    async def set_stream_enabled(self, stream_id: str, enabled: bool) -> Any:
        return await self.call('PATCH', STREAMS_ENDPOINT, stream_id, {'enabled': enabled})

    async def set_platform_enabled(self, stream_id: str, platform_id: str, enabled: bool) -> Any:
        return await self.call('PATCH', STREAMS_ENDPOINT,
                               f"{stream_id}/platforms/{platform_id}", {'enabled': enabled})
