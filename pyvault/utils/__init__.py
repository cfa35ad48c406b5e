"""
Utility modules

This package provides error types, logging and configuration management.
"""

from pyvault.utils.errors import (
    PyVaultError,
    IPCError,
    ConnectFailure,
    RemoteClose,
    ProtocolAnomaly,
    RPCError,
    ApplicationError,
)
from pyvault.utils.logging import get_logger
from pyvault.utils.config import ClientConfig

__all__ = [
    # Exceptions
    "PyVaultError",
    "IPCError",
    "ConnectFailure",
    "RemoteClose",
    "ProtocolAnomaly",
    "RPCError",
    "ApplicationError",
    
    # Utilities
    "get_logger",
    "ClientConfig",
]
