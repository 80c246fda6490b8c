"""
HTTP client utilities for composer-check-updates.

This module provides a small asynchronous HTTP client over ``httpx`` with
separate connect and total timeouts, a fixed User-Agent, optional retries
for transient failures, and JSON decoding that reports malformed bodies as
:class:`~composer_check_updates.exceptions.NetworkError`.
"""

from __future__ import annotations

import random
import asyncio
from typing import Any, Dict, Optional, cast

import httpx

from composer_check_updates.utils.logger import get_logger
from composer_check_updates.__version__ import __version__
from composer_check_updates.exceptions import NetworkError
from composer_check_updates.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


class HTTPClient:
    """Asynchronous HTTP client with connect/total timeouts and retries.

    Args:
        timeout: Total time allowed per request, in seconds.
        connect_timeout: Time allowed to establish a connection, in seconds.
        max_retries: Extra attempts after a timeout, transport error or 5xx.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.
        transport: Optional ``httpx`` transport, used by tests to stub the
            network.

    Example:
        >>> async with HTTPClient() as client:
        ...     data = await client.get_json("https://repo.packagist.org/p2/monolog/monolog.json")
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.max_retries = max_retries
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)

        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Initialize the underlying httpx client if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute a request, retrying timeouts, transport errors and 5xx.

        Any final status other than 2xx/3xx raises :class:`NetworkError`
        carrying the status code.
        """
        await self._ensure_client()
        assert self._client is not None

        last_exc: Optional[Exception] = None
        attempts = self.max_retries + 1

        for attempt in range(attempts):
            try:
                response = await self._client.request(method, url, **kwargs)

                if response.status_code >= 500 and attempt < self.max_retries:
                    logger.debug(
                        "HTTP %d (%d/%d): %s",
                        response.status_code,
                        attempt + 1,
                        attempts,
                        url,
                    )
                elif response.status_code >= 400:
                    raise NetworkError(
                        f"HTTP {response.status_code} error for {url}",
                        url=url,
                        status_code=response.status_code,
                    )
                else:
                    return response

            except httpx.TimeoutException as exc:
                last_exc = exc
                logger.debug("Request timeout (%d/%d): %s", attempt + 1, attempts, url)

            except httpx.TransportError as exc:
                last_exc = exc
                logger.debug("Transport error (%d/%d): %s", attempt + 1, attempts, exc)

            if attempt < self.max_retries:
                delay = (2**attempt) * 0.5 + random.uniform(0.0, 0.3)
                logger.debug("Retrying in %.2fs", delay)
                await asyncio.sleep(delay)

        raise NetworkError(
            f"Request failed after {attempts} attempt(s): {url}",
            url=url,
        ) from last_exc

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request."""
        return await self._request_with_retry("GET", url, **kwargs)

    async def get_json(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """Fetch a URL and parse the response body as a JSON object."""
        response = await self.get(url, **kwargs)

        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                response_body=response.text,
            ) from exc

        if not isinstance(data, dict):
            raise NetworkError(
                f"Expected JSON object from {url}",
                url=url,
                response_body=response.text,
            )

        return cast(Dict[str, Any], data)
