"""
Reachability Checker

Best-effort probe that a URL can be fetched before it is shortened.

A URL counts as reachable when a GET produces a response whose body can be
read to the end. The status code is not interpreted (a 404 page is still a
page) and redirects are not followed (the redirect response itself is a
response).
"""

import asyncio
import enum
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class CheckResult(enum.Enum):
    """Outcome of a reachability check."""
    OK = "ok"
    UNREACHABLE = "unreachable"
    TRANSPORT_ERROR = "transport_error"


class ReachabilityChecker(ABC):
    """Contract consumed by the shortening service."""

    @abstractmethod
    async def check(self, url: str) -> CheckResult:
        """Probe url and classify the outcome. Must not raise for network failures."""
        pass


class HttpReachabilityChecker(ReachabilityChecker):
    """
    httpx-based checker.

    Connection failures (refused, DNS, unsupported or malformed URL) are
    UNREACHABLE; timeouts and errors while reading the response (transport
    or stream errors) are TRANSPORT_ERROR. The whole check is bounded by `timeout`.
    """

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            timeout: Seconds allowed for connecting and for each read
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.timeout = timeout
        self.transport = transport

    async def _fetch(self, url: str) -> int:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=False,
            transport=self.transport,
        ) as client:
            async with client.stream("GET", url) as response:
                async for _ in response.aiter_bytes():
                    pass
                return response.status_code

    async def check(self, url: str) -> CheckResult:
        try:
            # httpx timeouts are per operation; a slowly dripping body needs an overall bound
            status_code = await asyncio.wait_for(self._fetch(url), timeout=self.timeout)
        except (httpx.ConnectError, httpx.UnsupportedProtocol, httpx.InvalidURL) as e:
            logger.info(f"URL unreachable: {url} ({e!r})")
            return CheckResult.UNREACHABLE
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.info(f"URL check timed out after {self.timeout}s: {url} ({e!r})")
            return CheckResult.TRANSPORT_ERROR
        except (httpx.HTTPError, httpx.StreamError) as e:
            logger.info(f"URL check failed: {url} ({e!r})")
            return CheckResult.TRANSPORT_ERROR

        logger.debug(f"URL reachable: {url} (status {status_code})")
        return CheckResult.OK
