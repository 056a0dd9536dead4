"""Integration tests: operation lifecycle over the HTTP invoker."""
import json
import httpx
import pytest
from lropoll.client.instances import CacheInstanceClient, instance_path, location_path
from lropoll.client.models import Instance
from lropoll.core.exceptions import (
    OperationFailedError,
    PollCancelledError,
    PollTransportError,
)
from lropoll.operation.models import PollOptions
from lropoll.transport.http import HttpRpcInvoker

NAME = instance_path("proj", "us-east1", "cache-1")


class FakeCacheService:
    """
    Minimal operations server: each operation finishes after a number of polls.

    cancelOperation marks the operation cancelled; its next status is a
    CANCELLED (code 1) error. Outage polls answer 503.
    """

    def __init__(self, polls_until_done: int = 2, outage_polls: int = 0):
        self.polls_until_done = polls_until_done
        self.outage_polls = outage_polls
        self.operations = {}
        self.log = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        body = json.loads(request.content)
        self.log.append(method)
        if method == "getOperation":
            return self._get_operation(body["name"])
        if method == "cancelOperation":
            self.operations[body["name"]]["cancelled"] = True
            return httpx.Response(200, json={})
        if method in ("createInstance", "deleteInstance", "failoverInstance"):
            return self._start(method, body)
        return httpx.Response(404, json={"error": {"code": 12, "message": f"unknown method {method}"}})

    def _start(self, method: str, body: dict) -> httpx.Response:
        name = f"operations/op-{len(self.operations) + 1}"
        target = body.get("name") or f"{body['parent']}/instances/{body['instanceId']}"
        self.operations[name] = {"method": method, "target": target, "polls": 0, "cancelled": False}
        return httpx.Response(200, json={
            "name": name,
            "done": False,
            "metadata": {"verb": method, "target": target},
        })

    def _get_operation(self, name: str) -> httpx.Response:
        if self.outage_polls > 0:
            self.outage_polls -= 1
            return httpx.Response(503, json={"error": {"code": 14, "message": "unavailable"}})

        op = self.operations[name]
        op["polls"] += 1
        envelope = {
            "name": name,
            "done": False,
            "metadata": {"verb": op["method"], "target": op["target"], "statusDetail": f"poll {op['polls']}"},
        }
        if op["cancelled"]:
            envelope.update(done=True, error={"code": 1, "message": "Operation cancelled"})
        elif op["polls"] >= self.polls_until_done:
            envelope["done"] = True
            if op["method"] != "deleteInstance":
                envelope["response"] = {"name": op["target"], "host": "10.0.0.3", "port": 6379}
        return httpx.Response(200, json=envelope)


def make_client(service: FakeCacheService) -> CacheInstanceClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(service.handler))
    return CacheInstanceClient(HttpRpcInvoker("http://cache.test/v1", client=http))


@pytest.mark.integration
@pytest.mark.asyncio
class TestOperationLifecycle:
    """Handles created by the client, driven through HTTP."""

    async def test_create_runs_to_completion(self, poller, fake_clock):
        """Test a create operation polls until done and returns the instance."""
        service = FakeCacheService(polls_until_done=3)
        client = make_client(service)

        operation = await client.create_instance(location_path("proj", "us-east1"), "cache-1", Instance(tier="BASIC"))
        result = await operation.wait(PollOptions(initial_delay=1.0, multiplier=2.0), poller=poller)

        assert result.name == NAME
        assert result.port == 6379
        assert operation.get_metadata().status_detail == "poll 3"
        assert fake_clock.sleeps == [1.0, 2.0]
        assert service.log == ["createInstance", "getOperation", "getOperation", "getOperation"]

    async def test_delete_resolves_to_none(self, poller):
        """Test a delete operation resolves to None."""
        client = make_client(FakeCacheService(polls_until_done=1))

        operation = await client.delete_instance(NAME)

        assert await operation.wait(PollOptions(), poller=poller) is None

    async def test_service_outage_is_retried(self, poller, fake_clock):
        """Test 503s while polling are retried with backoff."""
        service = FakeCacheService(polls_until_done=1, outage_polls=2)
        client = make_client(service)

        operation = await client.failover_instance(NAME)
        result = await operation.wait(PollOptions(initial_delay=1.0, multiplier=2.0), poller=poller)

        assert result.host == "10.0.0.3"
        assert fake_clock.sleeps == [1.0, 2.0]

    async def test_persistent_outage_raises_transport_error(self, poller):
        """Test an outage longer than the attempt budget raises PollTransportError."""
        service = FakeCacheService(polls_until_done=1, outage_polls=10)
        client = make_client(service)

        operation = await client.failover_instance(NAME)

        with pytest.raises(PollTransportError):
            await operation.wait(PollOptions(max_attempts=3), poller=poller)

        assert operation.is_done() is False
        assert service.log.count("getOperation") == 3

    async def test_cancel_stops_polling_immediately(self, poller):
        """Test cancel() with no grace period stops the next poll session at once."""
        service = FakeCacheService(polls_until_done=10)
        client = make_client(service)
        operation = await client.create_instance(location_path("proj", "us-east1"), "cache-1", Instance())

        await operation.cancel()

        with pytest.raises(PollCancelledError):
            await operation.wait(PollOptions(), poller=poller)

        assert service.log == ["createInstance", "cancelOperation"]

    async def test_wait_after_cancelled_session_sees_remote_outcome(self, poller):
        """Test a later wait() fetches again and resolves to the server-side cancellation."""
        service = FakeCacheService(polls_until_done=10)
        client = make_client(service)
        operation = await client.create_instance(location_path("proj", "us-east1"), "cache-1", Instance())
        await operation.cancel()

        with pytest.raises(PollCancelledError):
            await operation.wait(PollOptions(), poller=poller)

        with pytest.raises(OperationFailedError) as exc_info:
            await operation.wait(PollOptions(), poller=poller)

        assert exc_info.value.code == 1
        assert operation.is_done() is True
        assert service.log == ["createInstance", "cancelOperation", "getOperation"]

    async def test_cancel_with_grace_observes_remote_outcome(self, poller):
        """Test a grace period lets the poller see the server-side cancellation."""
        service = FakeCacheService(polls_until_done=10)
        client = make_client(service)
        operation = await client.create_instance(location_path("proj", "us-east1"), "cache-1", Instance())

        await operation.cancel()

        with pytest.raises(OperationFailedError) as exc_info:
            await operation.wait(PollOptions(cancel_grace_period=5.0), poller=poller)

        assert exc_info.value.code == 1
        assert operation.is_done() is True
        assert operation.failure.message == "Operation cancelled"
