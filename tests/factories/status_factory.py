"""Test factories for raw operation statuses and scripted status fetchers."""
import json
from typing import Any, List, Optional, Union
from lropoll.operation.models import RawStatus


def _payload(value: Any) -> Optional[bytes]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value
    return json.dumps(value).encode()


def pending_status(metadata: Any = None) -> RawStatus:
    """Build a not-done status with optional JSON metadata."""
    return RawStatus(done=False, metadata=_payload(metadata))


def done_status(result: Any = None, metadata: Any = None) -> RawStatus:
    """Build a successful terminal status with an optional JSON result."""
    return RawStatus(done=True, result=_payload(result), metadata=_payload(metadata))


def failed_status(code: int = 1, message: str = "x", metadata: Any = None) -> RawStatus:
    """Build a failed terminal status."""
    return RawStatus(
        done=True,
        metadata=_payload(metadata),
        error_code=code,
        error_message=message,
    )


class ScriptedFetcher:
    """
    Status fetcher that replays a script of statuses and exceptions.

    The last entry repeats once the script runs out. Every call is recorded.
    """

    def __init__(self, script: List[Union[RawStatus, Exception]]):
        self.script = list(script)
        self.calls: List[str] = []
        self.on_call = None

    async def __call__(self, operation_id: str) -> RawStatus:
        self.calls.append(operation_id)
        index = min(len(self.calls), len(self.script)) - 1
        entry = self.script[index]
        if self.on_call is not None:
            await self.on_call(len(self.calls))
        if isinstance(entry, Exception):
            raise entry
        return entry
