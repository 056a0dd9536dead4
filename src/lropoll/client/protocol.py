"""RPC invoker protocol: call a remote method with a JSON-shaped request."""
from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class RpcInvoker(Protocol):
    """
    RPC invoker: send request, get response. Transport is the implementer's choice.

    Failed calls raise RpcError.
    """

    async def invoke(self, method: str, request: Dict[str, Any]) -> Dict[str, Any]:
        ...
