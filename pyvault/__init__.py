"""
PyVault - thin client for a password vault backend

The vault's sensitive logic (encryption, storage) runs in a separate backend
process. PyVault talks to it with JSON-RPC 2.0 over a persistent WebSocket,
multiplexing concurrent calls over one lazily opened connection.
"""

__version__ = "0.1.0"
__license__ = "MIT"

# IPC imports
from pyvault.ipc.client import Client
from pyvault.ipc.transport import Connector, ConnectionState

# Core imports for easy access
from pyvault.core.app import VaultApp
from pyvault.core.controller import VaultController, VaultSession
from pyvault.core.host import HostEnvironment, LocalHost
from pyvault.core.service import VaultService

# Utility imports
from pyvault.utils.config import ClientConfig
from pyvault.utils.errors import (
    PyVaultError,
    IPCError,
    ConnectFailure,
    RemoteClose,
    ProtocolAnomaly,
    RPCError,
    ApplicationError,
)

VERSION_INFO = tuple(int(part) for part in __version__.split('.') if part.isdigit())

__all__ = [
    # IPC
    "Client",
    "Connector",
    "ConnectionState",
    
    # Core classes
    "VaultApp",
    "VaultController",
    "VaultSession",
    "HostEnvironment",
    "LocalHost",
    "VaultService",
    
    # Configuration
    "ClientConfig",
    
    # Exceptions
    "PyVaultError",
    "IPCError",
    "ConnectFailure",
    "RemoteClose",
    "ProtocolAnomaly",
    "RPCError",
    "ApplicationError",
    
    # Version info
    "__version__",
    "VERSION_INFO",
]


def create_app(origin: str = "http://127.0.0.1:8000", **kwargs) -> VaultApp:
    """
    Create a vault client application for the backend at ``origin``.
    
    Args:
        origin: Page/host origin the backend is served from
        **kwargs: Additional ClientConfig options
        
    Example:
        >>> app = pyvault.create_app("http://localhost:8000")
    """
    return VaultApp(ClientConfig(origin=origin, **kwargs))
