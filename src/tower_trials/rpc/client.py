"""HTTP RPC client for the backend's stored procedures.

Procedures are invoked PostgREST-style: ``POST {base_url}/rest/v1/rpc/{name}``
with the named parameters as a JSON body. Every request is bounded by the
configured timeout. Read-only procedures are retried with exponential
backoff on transport failures; mutations are sent exactly once.

Example:
    >>> async with HttpRpcClient.from_settings() as rpc:
    ...     rows = await rpc.call("get_floor_data", {"p_floor_number": 3}, read_only=True)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from tower_trials.core.config import RpcSettings, get_settings
from tower_trials.core.exceptions import RpcResponseError, RpcTransportError
from tower_trials.core.logging import get_logger


logger = get_logger(__name__)

RPC_PATH = "/rest/v1/rpc"

_GATEWAY_STATUSES = frozenset({502, 503, 504})


class HttpRpcClient:
    """Async stored-procedure client on top of httpx.

    Attributes:
        settings: Connection settings.
    """

    def __init__(
        self,
        settings: RpcSettings,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Connection settings.
            client: Preconfigured httpx client (tests pass one with a
                MockTransport); one is created from ``settings`` otherwise.
        """
        self.settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            headers=self._auth_headers(settings),
        )
        logger.info(
            "HttpRpcClient initialized",
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
            max_retries=settings.max_retries,
        )

    @classmethod
    def from_settings(cls) -> HttpRpcClient:
        return cls(get_settings().rpc)

    @staticmethod
    def _auth_headers(settings: RpcSettings) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if settings.api_key is not None:
            key = settings.api_key.get_secret_value()
            headers["apikey"] = key
            headers["Authorization"] = f"Bearer {key}"
        return headers

    async def _post(self, procedure: str, params: Mapping[str, Any] | None) -> Any:
        """Send one request and decode the response.

        Raises:
            RpcTransportError: On network errors, timeouts and gateway errors.
            RpcResponseError: On any other error status.
        """
        try:
            response = await self._client.post(f"{RPC_PATH}/{procedure}", json=dict(params or {}))
        except httpx.TimeoutException as exc:
            raise RpcTransportError(
                f"RPC timed out: {procedure}",
                procedure=procedure,
                details={"original_error": str(exc)},
            ) from exc
        except httpx.RequestError as exc:
            raise RpcTransportError(
                f"RPC request failed: {procedure}",
                procedure=procedure,
                details={"original_error": str(exc)},
            ) from exc

        if response.status_code in _GATEWAY_STATUSES:
            raise RpcTransportError(
                f"Backend unavailable: {procedure}",
                procedure=procedure,
                details={"status_code": response.status_code},
            )
        if response.is_error:
            raise RpcResponseError(
                self._error_message(response) or f"RPC failed: {procedure}",
                procedure=procedure,
                status_code=response.status_code,
            )
        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str | None:
        try:
            body = response.json()
        except ValueError:
            return response.text or None
        if isinstance(body, dict):
            return body.get("message") or body.get("error")
        return None

    async def call(
        self,
        procedure: str,
        params: Mapping[str, Any] | None = None,
        *,
        read_only: bool = False,
    ) -> Any:
        """Invoke a stored procedure.

        Args:
            procedure: Stored procedure name.
            params: Named parameters.
            read_only: Retry transport failures when True.

        Returns:
            The decoded JSON result (None for void procedures).

        Raises:
            RpcTransportError: If no response was received after all attempts.
            RpcResponseError: If the backend returned an error.
        """
        logger.debug("RPC call", procedure=procedure, read_only=read_only)
        if not read_only or self.settings.max_retries == 0:
            return await self._post(procedure, params)

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(RpcTransportError),
            stop=stop_after_attempt(self.settings.max_retries + 1),
            wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "Retrying RPC",
                        procedure=procedure,
                        attempt=attempt.retry_state.attempt_number,
                    )
                return await self._post(procedure, params)
        raise RpcTransportError(f"RPC retries exhausted: {procedure}", procedure=procedure)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpRpcClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["HttpRpcClient", "RPC_PATH"]
