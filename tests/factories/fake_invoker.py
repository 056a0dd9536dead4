"""In-memory RPC invoker for client tests."""
from typing import Any, Dict, List, Tuple
from lropoll.core.exceptions import RpcError


class FakeInvoker:
    """
    RPC invoker returning canned responses per method.

    A response may be a dict, an exception to raise, or a list consumed one
    entry per call (the last entry repeats). Every call is recorded.
    """

    def __init__(self, responses: Dict[str, Any] = None):
        self.responses = dict(responses or {})
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def invoke(self, method: str, request: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append((method, request))
        if method not in self.responses:
            raise RpcError("UNIMPLEMENTED", f"No response for {method}")

        response = self.responses[method]
        if isinstance(response, list):
            count = sum(1 for name, _ in self.calls if name == method)
            response = response[min(count, len(response)) - 1]
        if isinstance(response, Exception):
            raise response
        return response

    def requests_for(self, method: str) -> List[Dict[str, Any]]:
        """Return the requests sent to one method, in order."""
        return [request for name, request in self.calls if name == method]
