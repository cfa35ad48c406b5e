"""
PyVault Application

The composition root: builds the single backend client and hands it, with
the session state, to everything that issues calls.
"""

from typing import Optional

from pyvault.core.controller import VaultController, VaultSession
from pyvault.core.host import HostEnvironment, LocalHost
from pyvault.core.service import VaultService
from pyvault.ipc.client import Client
from pyvault.utils.config import ClientConfig
from pyvault.utils.logging import get_logger, set_level

logger = get_logger(__name__)


class VaultApp:
    """
    Vault client application context.
    
    Example:
        >>> async with VaultApp(ClientConfig(origin="http://127.0.0.1:8000")) as app:
        ...     if await app.controller.unlock("secret"):
        ...         items = await app.service.list_password(app.session.master_password)
    """
    
    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        host: Optional[HostEnvironment] = None,
        client: Optional[Client] = None
    ):
        self.config = config or ClientConfig.from_env()
        set_level(self.config.log_level)
        
        self.host = host or LocalHost()
        self.client = client or Client.from_config(self.config)
        self.session = VaultSession()
        self.service = VaultService(self.client, notify=self.host.toast)
        self.controller = VaultController(self.service, self.session, self.host)
        
        logger.info(f"VaultApp initialized for {self.client.connector.url}")
    
    async def start(self) -> None:
        """Learn whether the backend already has a master password."""
        await self.controller.refresh_master_password_state()
    
    async def close(self) -> None:
        self.session.lock()
        await self.client.close()
    
    async def __aenter__(self) -> "VaultApp":
        return self
    
    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
