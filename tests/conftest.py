"""
PyVault test configuration and fixtures

This module provides shared fixtures, an in-memory WebSocket double and
helpers for the entire test suite.
"""

import asyncio
import json
import shutil
import tempfile
from pathlib import Path
from typing import Any, Generator, List, Optional, Union

import pytest
from websockets.exceptions import ConnectionClosedError
from websockets.frames import Close

from pyvault.ipc.client import Client
from pyvault.utils.logging import get_logger

TEST_URL = "ws://vault.test/ws"

_CLOSED = object()


class FakeWebSocket:
    """In-memory stand-in for a websockets client connection."""
    
    def __init__(self):
        self.sent: List[str] = []
        self.inbound: asyncio.Queue = asyncio.Queue()
        self.closed = False
        self.close_code: Optional[int] = None
        self.close_reason: Optional[str] = None
        self._finished = False
    
    @property
    def requests(self) -> List[dict]:
        return [json.loads(message) for message in self.sent]
    
    async def send(self, message: str) -> None:
        if self.closed:
            raise ConnectionClosedError(Close(1006, ""), None)
        self.sent.append(message)
    
    def push(self, payload: Union[str, dict]) -> None:
        """Deliver a message from the backend."""
        self.inbound.put_nowait(payload if isinstance(payload, str) else json.dumps(payload))
    
    def reply(self, request_id: int, result: Any) -> None:
        self.push({"jsonrpc": "2.0", "id": request_id, "result": result})
    
    def reply_error(self, request_id: int, code: int, message: str, data: Any = None) -> None:
        error = {"code": code, "message": message}
        if data is not None:
            error["data"] = data
        self.push({"jsonrpc": "2.0", "id": request_id, "error": error})
    
    def server_close(self, code: int = 1000, reason: str = "") -> None:
        """Close the socket from the backend side."""
        if self._finished:
            return
        self._finished = True
        self.closed = True
        self.close_code = code
        self.close_reason = reason
        self.inbound.put_nowait(_CLOSED)
    
    def fail(self, code: int = 1011, reason: str = "internal error") -> None:
        """Drop the socket with an error."""
        self._finished = True
        self.closed = True
        self.inbound.put_nowait(ConnectionClosedError(Close(code, reason), None))
    
    async def close(self) -> None:
        self.server_close(1000, "")
    
    def __aiter__(self):
        return self
    
    async def __anext__(self):
        item = await self.inbound.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item


class FakeSocketFactory:
    """Replacement for ``websockets.connect`` producing FakeWebSockets."""
    
    def __init__(self):
        self.sockets: List[FakeWebSocket] = []
        self.calls: List[tuple] = []
        self.failures: List[BaseException] = []
        self.gate: Optional[asyncio.Event] = None
    
    @property
    def last(self) -> FakeWebSocket:
        return self.sockets[-1]
    
    async def __call__(self, url: str, **options) -> FakeWebSocket:
        self.calls.append((url, options))
        if self.gate is not None:
            await self.gate.wait()
        if self.failures:
            raise self.failures.pop(0)
        ws = FakeWebSocket()
        self.sockets.append(ws)
        return ws


class TestHelper:
    """Helper class for common test operations."""
    
    @staticmethod
    async def wait_for_condition(
        condition_func,
        timeout: float = 2.0,
        interval: float = 0.001
    ) -> bool:
        """Wait for a condition to become true."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        
        while loop.time() < deadline:
            if condition_func():
                return True
            await asyncio.sleep(interval)
        
        return False
    
    @classmethod
    async def wait_for_sent(cls, factory: FakeSocketFactory, count: int) -> FakeWebSocket:
        """Wait until the current socket has sent ``count`` messages."""
        assert await cls.wait_for_condition(
            lambda: factory.sockets and len(factory.last.sent) >= count
        ), f"expected {count} sent message(s)"
        return factory.last


@pytest.fixture
def test_helper():
    """Get test helper instance."""
    return TestHelper()


@pytest.fixture
def socket_factory() -> FakeSocketFactory:
    return FakeSocketFactory()


@pytest.fixture
async def client(socket_factory: FakeSocketFactory):
    """Client wired to the in-memory socket factory."""
    client = Client(TEST_URL, connect_factory=socket_factory)
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_dir = Path(tempfile.mkdtemp(prefix="pyvault_test_"))
    try:
        yield temp_dir
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def logger():
    """Get a test logger instance."""
    return get_logger("test", level="DEBUG")


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")


def pytest_collection_modifyitems(config, items):
    """Mark tests in integration/ directories."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
