"""HTTP + JSON RPC invoker."""
import logging
from typing import Any, Dict, Optional
import httpx
from lropoll.core.exceptions import RpcError

logger = logging.getLogger(__name__)


class HttpRpcInvoker:
    """
    Invokes RPC methods as JSON POSTs to {endpoint}/{method}.

    Non-2xx responses carry {"error": {"code": ..., "message": ...}} and are
    raised as RpcError. A 2xx body is returned as-is, including operation
    envelopes that report a failed operation in their own "error" field.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize HTTP invoker.

        Args:
            endpoint: Base URL of the service
            timeout: Per-request timeout in seconds
            client: Optional preconfigured httpx client (owned by the caller)
        """
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def invoke(self, method: str, request: Dict[str, Any]) -> Dict[str, Any]:
        """
        Call a remote method.

        Args:
            method: Method name, appended to the endpoint
            request: JSON-compatible request body

        Returns:
            Dict[str, Any]: Decoded JSON response (empty dict for an empty body)

        Raises:
            RpcError: On connection failure, error status, or malformed body
        """
        url = f"{self.endpoint}/{method}"
        try:
            response = await self.client.post(url, json=request)
        except httpx.HTTPError as e:
            logger.warning(f"RPC {method} failed: {e}")
            raise RpcError("UNAVAILABLE", str(e)) from e

        if response.is_error:
            raise self._error_from(response)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RpcError("INTERNAL", f"Invalid JSON from {method}: {e}") from e

    def _error_from(self, response: httpx.Response) -> RpcError:
        try:
            data = response.json()
        except ValueError:
            return RpcError(response.status_code, response.text or response.reason_phrase)

        err = data.get("error") if isinstance(data, dict) else None
        if isinstance(err, dict):
            return RpcError(err.get("code", response.status_code), err.get("message", str(err)))
        if err is not None:
            return RpcError(response.status_code, str(err))
        return RpcError(response.status_code, response.text)

    async def aclose(self) -> None:
        """Close the underlying client if this invoker created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpRpcInvoker":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
