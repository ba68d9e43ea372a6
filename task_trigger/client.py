"""Client for the Qlik Repository Service (QRS) control-plane API."""

import logging
import random
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from urllib.parse import quote

import aiohttp
from multidict import CIMultiDict

from task_trigger.models.config import ServerConfig, StatusEndpoint
from task_trigger.models.result import RawResponse
from task_trigger.xrf import make_xrf_key

log = logging.getLogger(__name__)

XRF_HEADER = "X-Qlik-Xrfkey"
API_ROOT = "/qrs"


class NetworkError(Exception):
    """Raised when the repository service cannot be reached."""


@dataclass(frozen=True, kw_only=True)
class QrsClient:
    """Issues single-shot requests against the repository service.

    Every request carries a fresh xrf key in both the query string and the
    ``X-Qlik-Xrfkey`` header, plus the session cookies of the hosting
    context. Non-2xx responses are returned as-is; only transport failures
    raise.
    """

    session: aiohttp.ClientSession = field(repr=False)
    proxy_prefix: str = ""
    rng: random.Random | None = field(default=None, repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls,
        config: ServerConfig,
        *,
        proxy_prefix: str = "",
        rng: random.Random | None = None,
    ) -> AsyncGenerator["QrsClient", None]:
        """Create client with managed session lifecycle."""
        cookies = {
            name: value.get_secret_value() for name, value in config.cookies.items()
        }
        async with aiohttp.ClientSession(
            base_url=config.server_url,
            cookies=cookies,
        ) as session:
            yield cls(session=session, proxy_prefix=proxy_prefix, rng=rng)

    def with_prefix(self, proxy_prefix: str) -> "QrsClient":
        """Return a client sharing this session but routed through another prefix."""
        return QrsClient(session=self.session, proxy_prefix=proxy_prefix, rng=self.rng)

    async def request(
        self,
        path: str,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
    ) -> RawResponse:
        """Send one request and return its status line and body.

        Args:
            path: Endpoint path below the proxy prefix, e.g. ``/qrs/task/{id}``
            method: HTTP method
            headers: Extra headers, applied after the xrf and accept headers

        Returns:
            The raw response, whatever its status

        Raises:
            NetworkError: If the request fails below the HTTP layer

        """
        key = make_xrf_key(self.rng)
        separator = "&" if "?" in path else "?"
        url = f"{self.proxy_prefix}{path}{separator}xrfkey={key}"

        request_headers = CIMultiDict({XRF_HEADER: key, "Accept": "application/json"})
        if headers:
            request_headers.update(headers)

        log.debug("%s %s", method, url)
        try:
            async with self.session.request(
                method, url, headers=request_headers
            ) as response:
                body = await response.text(errors="replace")
                return RawResponse(
                    status=response.status,
                    reason=response.reason or "",
                    body=body,
                )
        except (aiohttp.ClientError, TimeoutError) as e:
            log.warning("Request %s %s failed: %s", method, path, e)
            raise NetworkError(str(e) or type(e).__name__) from e

    async def start_task(self, task_id: str) -> RawResponse:
        """Ask the service to start a task."""
        return await self.request(
            f"{API_ROOT}/task/{quote(task_id, safe='')}/start", method="POST"
        )

    async def read_task(
        self, task_id: str, endpoint: StatusEndpoint = "reloadtask"
    ) -> RawResponse:
        """Fetch a task record including its last execution."""
        return await self.request(f"{API_ROOT}/{endpoint}/{quote(task_id, safe='')}")
