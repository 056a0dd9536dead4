"""Shared pytest fixtures for all tests."""
import json
import pytest
from lropoll.config import get_settings
from lropoll.operation.descriptor import OperationDescriptor
from lropoll.operation.poller import OperationPoller


class FakeClock:
    """Monotonic clock advanced only by sleeps; records every sleep."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def clock(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """
    Reset the cached settings before each test.

    Tests that change environment variables get a fresh Settings instance.
    """
    get_settings.cache_clear()

    yield

    get_settings.cache_clear()


@pytest.fixture
def fake_clock():
    """Provide a fake clock whose time moves only when the poller sleeps."""
    return FakeClock()


@pytest.fixture
def poller(fake_clock):
    """Provide a poller that never really sleeps."""
    return OperationPoller(sleep=fake_clock.sleep, clock=fake_clock.clock)


@pytest.fixture
def json_descriptor():
    """Provide decode hooks that parse JSON payloads."""
    return OperationDescriptor(
        "testOperation",
        decode_result=json.loads,
        decode_metadata=json.loads,
    )
