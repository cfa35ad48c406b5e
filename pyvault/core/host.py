"""
PyVault Host Environment

Host-side helpers the vault client relies on: notifications, clipboard,
the reachable network address and the file choosers/savers used by import
and export. A native bridge (for example an embedding mobile app)
implements these natively; LocalHost implements them on the local machine.
"""

import ipaddress
import shutil
import socket
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

import aiofiles
import psutil

from pyvault.utils.errors import ValidationError, handle_async_exception, handle_exception
from pyvault.utils.logging import get_logger

logger = get_logger(__name__)


class HostEnvironment(ABC):
    """Abstract host environment."""
    
    @property
    @abstractmethod
    def is_native_bridge(self) -> bool:
        """True when running inside an app that provides a native bridge."""
        pass
    
    @abstractmethod
    def toast(self, message: str, long: bool = False) -> None:
        """Show a transient notification."""
        pass
    
    @abstractmethod
    async def copy_to_clipboard(self, content: str) -> None:
        pass
    
    @abstractmethod
    def get_ip(self) -> Optional[str]:
        """Address other devices can reach this host on, if known."""
        pass
    
    @abstractmethod
    async def choose_import_file(self) -> Optional[str]:
        """Let the user pick a file the backend can read. None if cancelled."""
        pass
    
    @abstractmethod
    async def read_import_file(self) -> Optional[str]:
        """Let the user pick a file and return its text. None if cancelled."""
        pass
    
    @abstractmethod
    def get_cache_dir(self) -> str:
        pass
    
    @abstractmethod
    def save_export_file(self, file: str) -> None:
        """Copy an exported file to a user-chosen location."""
        pass
    
    @abstractmethod
    async def download(self, name: str, content: str) -> None:
        """Hand ``content`` to the user as a file called ``name``."""
        pass


class LocalHost(HostEnvironment):
    """
    Host backed by the local filesystem.
    
    Notifications go to the log, the clipboard is kept in memory, imports
    read ``import_file`` and exports land in ``download_dir``.
    """
    
    def __init__(
        self,
        download_dir: Optional[Union[str, Path]] = None,
        import_file: Optional[Union[str, Path]] = None,
        cache_dir: Optional[Union[str, Path]] = None
    ):
        self.download_dir = Path(download_dir) if download_dir else Path.cwd()
        self.import_file = Path(import_file) if import_file else None
        self.cache_dir = Path(cache_dir) if cache_dir else Path(tempfile.gettempdir()) / "pyvault"
        self.clipboard: Optional[str] = None
        self.messages: List[str] = []
    
    @property
    def is_native_bridge(self) -> bool:
        return False
    
    def toast(self, message: str, long: bool = False) -> None:
        self.messages.append(message)
        logger.info(f"[toast] {message}")
    
    async def copy_to_clipboard(self, content: str) -> None:
        self.clipboard = content
    
    def get_ip(self) -> Optional[str]:
        """First IPv4 address of an interface that is up and not loopback."""
        stats = psutil.net_if_stats()
        for name, addresses in psutil.net_if_addrs().items():
            if name not in stats or not stats[name].isup:
                continue
            for address in addresses:
                if address.family == socket.AF_INET and not ipaddress.ip_address(address.address).is_loopback:
                    return address.address
        return None
    
    async def choose_import_file(self) -> Optional[str]:
        return str(self.import_file) if self.import_file else None
    
    @handle_async_exception
    async def read_import_file(self) -> Optional[str]:
        if self.import_file is None:
            return None
        
        try:
            async with aiofiles.open(self.import_file, 'r', encoding='utf-8') as f:
                return await f.read()
        except (IOError, UnicodeDecodeError) as e:
            raise ValidationError(
                f"Failed to read import file: {str(e)}",
                details={'file': str(self.import_file)}
            ) from e
    
    def get_cache_dir(self) -> str:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        return str(self.cache_dir)
    
    @handle_exception
    def save_export_file(self, file: str) -> None:
        source = Path(file)
        if not source.is_file():
            raise ValidationError(f"Export file not found: {file}", details={'file': file})
        
        self.download_dir.mkdir(parents=True, exist_ok=True)
        target = shutil.copy(source, self.download_dir / source.name)
        logger.info(f"Saved {target}")
    
    @handle_async_exception
    async def download(self, name: str, content: str) -> None:
        if Path(name).name != name:
            raise ValidationError(f"Invalid download name: {name!r}")
        
        self.download_dir.mkdir(parents=True, exist_ok=True)
        target = self.download_dir / name
        async with aiofiles.open(target, 'w', encoding='utf-8') as f:
            await f.write(content)
        logger.info(f"Saved {target}")
