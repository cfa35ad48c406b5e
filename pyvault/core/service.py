"""
PyVault Remote Procedures

This module exposes every procedure of the vault backend as an ordinary
coroutine and turns call failures into user-facing notifications.
"""

from typing import Any, Callable, Dict, List, Optional

from pyvault.core.types import Count, ImportSource, Item, Password, PasswordOption, PasswordRows
from pyvault.ipc.client import Client
from pyvault.utils.errors import ApplicationError, ConnectFailure, RemoteClose
from pyvault.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_MESSAGES: Dict[str, str] = {
    'WrongPassword': "Wrong password",
    'DeserializeFailed': "Failed to parse file",
}

CONNECT_FAILURE_MESSAGE = "Connection error"
REMOTE_CLOSE_MESSAGE = "Connection closed"


def describe_error(error: ApplicationError) -> str:
    """Message shown for a backend error reply."""
    kind = error.kind
    if kind is not None:
        return ERROR_MESSAGES.get(kind, f"Error ({kind})")
    return f"Error ({error.message})"


class VaultService:
    """
    Vault backend procedures.
    
    Each failure is reported once through ``notify`` and then re-raised,
    so callers can still react to it.
    """
    
    def __init__(self, client: Client, notify: Optional[Callable[[str], None]] = None):
        self.client = client
        self.notify = notify or (lambda message: logger.warning(message))
    
    async def _invoke(self, method: str, *params: Any) -> Any:
        try:
            return await self.client.call(method, *params)
        except ApplicationError as e:
            logger.debug(f"{method} failed with kind={e.kind} code={e.code}")
            self.notify(describe_error(e))
            raise
        except ConnectFailure:
            self.notify(CONNECT_FAILURE_MESSAGE)
            raise
        except RemoteClose:
            self.notify(REMOTE_CLOSE_MESSAGE)
            raise
    
    async def is_master_password_set(self) -> bool:
        return await self._invoke("is_master_password_set")
    
    async def set_master_password(self, master_password: str) -> None:
        await self._invoke("set_master_password", master_password)
    
    async def verify_master_password(self, master_password: str) -> bool:
        return await self._invoke("verify_master_password", master_password)
    
    async def list_password(self, master_password: str) -> List[Item]:
        return await self._invoke("list_password", master_password)
    
    async def get_password(self, master_password: str, id: int) -> Password:
        return await self._invoke("get_password", master_password, id)
    
    async def add_password(self, master_password: str, name: str, password: str) -> None:
        await self._invoke("add_password", master_password, name, password)
    
    async def update_password(self, master_password: str, id: int, name: str, password: str) -> None:
        await self._invoke("update_password", master_password, id, name, password)
    
    async def delete_password(self, master_password: str, id: int) -> None:
        await self._invoke("delete_password", master_password, id)
    
    async def import_password(self, master_password: str, decrypt_password: Optional[str],
                              source: ImportSource) -> Count:
        """
        Import passwords.
        
        Args:
            master_password: Current master password
            decrypt_password: Password protecting the imported data, if any
            source: File path readable by the backend, or inline rows
        """
        return await self._invoke("import_password", master_password, decrypt_password, source)
    
    async def export_password(self, master_password: str, file: Optional[str]) -> Optional[PasswordRows]:
        """
        Export passwords.
        
        When ``file`` is given the backend writes there and returns None,
        otherwise the rows are returned.
        """
        return await self._invoke("export_password", master_password, file)
    
    async def make_password(self, option: PasswordOption) -> str:
        return await self._invoke("make_password", option)
    
    async def change_password(self, master_password: str, new_password: str) -> None:
        await self._invoke("change_password", master_password, new_password)
    
    async def get_network_port(self) -> Optional[int]:
        """Port the backend is reachable on from the network, None if disabled."""
        return await self._invoke("get_network_port")
    
    async def enable_network_access(self) -> int:
        return await self._invoke("enable_network_access")
    
    async def disable_network_access(self) -> None:
        await self._invoke("disable_network_access")
