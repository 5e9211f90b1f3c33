import asyncio
from typing import Any, Dict, Optional

import httpx

from config import logger
from config.constants import HTTP_CONFIG
from exceptions import (
    AgentInvalidResponseException,
    AgentRejectedException,
    AgentTimeoutException,
    AgentUnavailableException,
)
from utils.retry import async_retry


class TransientUpstreamError(Exception):
    """5xx or connection-level failure. The only thing worth retrying."""


class AgentHTTPClient:
    """
    One shared httpx client for every external agent.

    Transient failures (5xx, connection errors) get exactly one retry.
    4xx and timeouts are never retried.
    """

    def __init__(
        self,
        timeout: float = HTTP_CONFIG.DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": HTTP_CONFIG.USER_AGENT},
        )

    async def aclose(self):
        await self._client.aclose()

    async def request_json(
        self,
        agent_id: str,
        method: str,
        url: str,
        deadline: float,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        Call an upstream and decode its JSON body.
        Args:
            agent_id: Calling agent, used for error attribution
            method: HTTP method
            url: Absolute URL
            deadline: Event-loop time after which the call is abandoned
        Returns:
            Decoded JSON body
        Raises:
            AgentTimeoutException, AgentRejectedException,
            AgentUnavailableException, AgentInvalidResponseException
        """
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise AgentTimeoutException(agent_id, "deadline passed before the request was sent")

        try:
            response = await self._send(method, url, deadline=deadline, params=params, json=json, headers=headers)
        except httpx.TimeoutException as e:
            raise AgentTimeoutException(agent_id, f"upstream timed out: {type(e).__name__}") from e
        except TransientUpstreamError as e:
            raise AgentUnavailableException(agent_id, str(e)) from e

        if 400 <= response.status_code < 500:
            logger.warning(f"{agent_id}: upstream rejected request with {response.status_code}")
            raise AgentRejectedException(agent_id, response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{agent_id}: upstream returned non-JSON response: {response.text[:200]}")
            raise AgentInvalidResponseException(agent_id, "response body is not valid JSON") from e

    @async_retry(max_attempts=HTTP_CONFIG.MAX_ATTEMPTS, exceptions=(TransientUpstreamError,))
    async def _send(self, method: str, url: str, deadline: float, **kwargs) -> httpx.Response:
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise httpx.TimeoutException("deadline reached between attempts")
        try:
            response = await self._client.request(method, url, timeout=remaining, **kwargs)
        except httpx.TimeoutException:
            raise
        except httpx.TransportError as e:
            raise TransientUpstreamError(f"connection failed: {type(e).__name__}") from e

        if response.status_code >= 500:
            raise TransientUpstreamError(f"upstream returned {response.status_code}")
        return response
