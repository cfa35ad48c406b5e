"""
PyVault Controller

Session state (master password) and the multi-step flows built on top of
the remote procedures: unlocking, network address lookup, and
importing and exporting passwords.
"""

import json
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from pyvault.core.host import HostEnvironment
from pyvault.core.service import VaultService
from pyvault.core.types import DecryptPassword, PasswordRows
from pyvault.utils.errors import ValidationError
from pyvault.utils.logging import get_logger

logger = get_logger(__name__)

PARSE_FAILED_MESSAGE = "Failed to parse file"

GetDecryptPassword = Callable[[], Awaitable[Optional[DecryptPassword]]]


@dataclass
class VaultSession:
    """Client-side session state shared by every view."""
    
    # None until asked from the backend
    is_master_password_set: Optional[bool] = None
    master_password: Optional[str] = None
    
    @property
    def is_unlocked(self) -> bool:
        return bool(self.master_password)
    
    def lock(self) -> None:
        self.master_password = None


def decode_import_data(data: str) -> Optional[PasswordRows]:
    """
    Decode exported password data.
    
    Returns:
        The ``[name, password]`` rows, or None if ``data`` is not a JSON
        list of two-string lists
    """
    try:
        rows = json.loads(data)
    except (TypeError, ValueError):
        return None
    
    if not isinstance(rows, list):
        return None
    
    for row in rows:
        if (not isinstance(row, list) or len(row) != 2
                or not isinstance(row[0], str) or not isinstance(row[1], str)):
            return None
    
    return rows


def make_export_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return now.strftime("passwords_%Y%m%d_%H%M%S.txt")


def describe_import(insert: int, ignore: int) -> str:
    message = f"Imported {insert} passwords"
    if ignore > 0:
        message += f", ignored {ignore} duplicate passwords"
    return message


class VaultController:
    """Application flows composed from vault procedures and host helpers."""
    
    def __init__(self, service: VaultService, session: VaultSession, host: HostEnvironment):
        self.service = service
        self.session = session
        self.host = host
    
    def _require_master_password(self) -> str:
        if not self.session.master_password:
            raise ValidationError("Vault is locked")
        return self.session.master_password
    
    async def refresh_master_password_state(self) -> bool:
        """Ask the backend whether a master password exists and remember it."""
        is_set = await self.service.is_master_password_set()
        self.session.is_master_password_set = bool(is_set)
        return self.session.is_master_password_set
    
    async def setup(self, master_password: str) -> None:
        """Create the master password and unlock with it."""
        await self.service.set_master_password(master_password)
        self.session.is_master_password_set = True
        self.session.master_password = master_password
    
    async def unlock(self, master_password: str) -> bool:
        """
        Verify ``master_password`` and keep it for later calls.
        
        Returns:
            bool: False if the backend rejected the password
        """
        if not await self.service.verify_master_password(master_password):
            logger.info("Master password rejected")
            return False
        
        self.session.master_password = master_password
        return True
    
    async def change_master_password(self, new_password: str) -> None:
        await self.service.change_password(self._require_master_password(), new_password)
        self.session.master_password = new_password
    
    async def network_address(self) -> Optional[str]:
        """
        Address other devices use to reach the vault, as ``ip:port``.
        
        Returns:
            None while network access is disabled or no address is known
        """
        port = await self.service.get_network_port()
        if port is None:
            return None
        
        ip = self.host.get_ip()
        if not ip:
            logger.warning("Network access is enabled but no address was found")
            return None
        return f"{ip}:{port}"
    
    async def import_passwords(self, get_decrypt_password: GetDecryptPassword) -> bool:
        """
        Import passwords chosen by the user.
        
        Args:
            get_decrypt_password: Asks the user for the password protecting
                the data; returns None to abort
            
        Returns:
            bool: False if nothing was imported
        """
        master_password = self._require_master_password()
        
        source: Any
        if self.host.is_native_bridge:
            source = await self.host.choose_import_file()
            if source is None:
                return False
        else:
            text = await self.host.read_import_file()
            if text is None:
                return False
            source = decode_import_data(text)
            if source is None:
                self.host.toast(PARSE_FAILED_MESSAGE)
                return False
        
        decrypt_password = await get_decrypt_password()
        if decrypt_password is None:
            return False
        
        count = await self.service.import_password(
            master_password, decrypt_password.get('password'), source
        )
        self.host.toast(describe_import(count['insert'], count['ignore']))
        
        return count['insert'] > 0
    
    async def export_passwords(self) -> None:
        """Export every password to a file handed to the user."""
        master_password = self._require_master_password()
        
        if self.host.is_native_bridge:
            file = f"{self.host.get_cache_dir()}/{int(time.time() * 1000)}"
            await self.service.export_password(master_password, file)
            self.host.save_export_file(file)
        else:
            rows = await self.service.export_password(master_password, None)
            await self.host.download(make_export_filename(), json.dumps(rows))
