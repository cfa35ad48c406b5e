"""
Unit tests for the PyVault remote procedure surface

Tests argument forwarding for every procedure and the classification of
failures into user-facing notifications.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from pyvault.core.service import (
    CONNECT_FAILURE_MESSAGE,
    REMOTE_CLOSE_MESSAGE,
    VaultService,
    describe_error,
)
from pyvault.utils.errors import ApplicationError, ConnectFailure, RemoteClose


def _app_error(kind=None, message="bad"):
    error = {"code": -1, "message": message}
    if kind is not None:
        error["data"] = {"kind": kind}
    return ApplicationError({"id": 1, "error": error})


class TestDescribeError:
    """Test the kind-to-message lookup."""
    
    def test_known_kinds(self):
        assert describe_error(_app_error("WrongPassword")) == "Wrong password"
        assert describe_error(_app_error("DeserializeFailed")) == "Failed to parse file"
    
    def test_unknown_kind(self):
        assert describe_error(_app_error("InternalError")) == "Error (InternalError)"
    
    def test_no_kind_uses_message(self):
        assert describe_error(_app_error(message="Method not found")) == "Error (Method not found)"


class TestVaultServiceForwarding:
    """Test that each procedure is forwarded with its positional arguments."""
    
    def setup_method(self):
        self.client = MagicMock()
        self.client.call = AsyncMock(return_value="ok")
        self.notify = MagicMock()
        self.service = VaultService(self.client, notify=self.notify)
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, args", [
        ("is_master_password_set", ()),
        ("set_master_password", ("mp",)),
        ("verify_master_password", ("mp",)),
        ("list_password", ("mp",)),
        ("get_password", ("mp", 1)),
        ("add_password", ("mp", "mail", "hunter2")),
        ("update_password", ("mp", 1, "mail", "hunter3")),
        ("delete_password", ("mp", 1)),
        ("import_password", ("mp", None, [["mail", "hunter2"]])),
        ("export_password", ("mp", None)),
        ("make_password", ({"len": 16, "uppercase": True, "lowercase": True,
                            "digit": True, "special": False},)),
        ("change_password", ("mp", "new")),
        ("get_network_port", ()),
        ("enable_network_access", ()),
        ("disable_network_access", ()),
    ])
    async def test_forwards_call(self, method, args):
        await getattr(self.service, method)(*args)
        
        self.client.call.assert_awaited_once_with(method, *args)
        self.notify.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_returns_result(self):
        self.client.call.return_value = [{"id": 1, "name": "mail"}]
        
        assert await self.service.list_password("mp") == [{"id": 1, "name": "mail"}]


class TestVaultServiceClassification:
    """Test that each failure kind yields one notification and is re-raised."""
    
    def setup_method(self):
        self.client = MagicMock()
        self.client.call = AsyncMock()
        self.notify = MagicMock()
        self.service = VaultService(self.client, notify=self.notify)
    
    @pytest.mark.asyncio
    async def test_application_error(self):
        error = _app_error("WrongPassword")
        self.client.call.side_effect = error
        
        with pytest.raises(ApplicationError) as exc_info:
            await self.service.verify_master_password("wrong")
        
        assert exc_info.value is error
        self.notify.assert_called_once_with("Wrong password")
    
    @pytest.mark.asyncio
    async def test_connect_failure(self):
        self.client.call.side_effect = ConnectFailure("refused", error=OSError())
        
        with pytest.raises(ConnectFailure):
            await self.service.is_master_password_set()
        
        self.notify.assert_called_once_with(CONNECT_FAILURE_MESSAGE)
    
    @pytest.mark.asyncio
    async def test_remote_close(self):
        self.client.call.side_effect = RemoteClose("closed", code=1006)
        
        with pytest.raises(RemoteClose):
            await self.service.list_password("mp")
        
        self.notify.assert_called_once_with(REMOTE_CLOSE_MESSAGE)
    
    @pytest.mark.asyncio
    async def test_other_errors_not_notified(self):
        self.client.call.side_effect = ValueError("boom")
        
        with pytest.raises(ValueError):
            await self.service.list_password("mp")
        
        self.notify.assert_not_called()
    
    def test_default_notify_logs(self, caplog):
        service = VaultService(self.client)
        service.notify("Connection error")
        
        assert "Connection error" in caplog.text


class TestVaultServiceOverSocket:
    """Test the service against the in-memory socket."""
    
    @pytest.mark.asyncio
    async def test_wrong_password_round_trip(self, client, socket_factory, test_helper):
        notify = MagicMock()
        service = VaultService(client, notify=notify)
        
        task = asyncio.create_task(service.verify_master_password("wrong"))
        ws = await test_helper.wait_for_sent(socket_factory, 1)
        assert ws.requests[0]["params"] == ["wrong"]
        
        ws.reply_error(1, -1, "wrong password", {"kind": "WrongPassword"})
        with pytest.raises(ApplicationError) as exc_info:
            await task
        
        assert exc_info.value.kind == "WrongPassword"
        notify.assert_called_once_with("Wrong password")
    
    @pytest.mark.asyncio
    async def test_unreachable_backend(self, client, socket_factory):
        notify = MagicMock()
        service = VaultService(client, notify=notify)
        socket_factory.failures.append(OSError("connection refused"))
        
        with pytest.raises(ConnectFailure):
            await service.get_network_port()
        
        notify.assert_called_once_with(CONNECT_FAILURE_MESSAGE)
