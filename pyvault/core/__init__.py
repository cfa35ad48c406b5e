"""
Core PyVault modules

- Remote procedure surface and error presentation
- Session state and import/export flows
- Host environment abstraction
- Application composition root
"""

from pyvault.core.app import VaultApp
from pyvault.core.controller import VaultController, VaultSession, decode_import_data
from pyvault.core.host import HostEnvironment, LocalHost
from pyvault.core.service import VaultService, describe_error

__all__ = [
    "VaultApp",
    "VaultController",
    "VaultSession",
    "decode_import_data",
    "HostEnvironment",
    "LocalHost",
    "VaultService",
    "describe_error",
]
