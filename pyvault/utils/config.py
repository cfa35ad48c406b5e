"""
PyVault Configuration Management

This module provides the client configuration dataclass, built from
keyword defaults layered under ``PYVAULT_*`` environment variables.
"""

import os
import re
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional
from urllib.parse import urlparse, urlunparse

from pyvault.utils.errors import ConfigError
from pyvault.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_ORIGIN = "http://127.0.0.1:8000"
DEFAULT_RPC_PATH = "/ws"
DEFAULT_DEV_PORT = 8000

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ClientConfig:
    """Configuration for the backend connection."""
    
    origin: str = DEFAULT_ORIGIN
    rpc_path: str = DEFAULT_RPC_PATH
    development_mode: bool = False
    dev_port: int = DEFAULT_DEV_PORT
    reject_pending_on_close: bool = False
    open_timeout: Optional[float] = 10.0
    max_message_size: Optional[int] = 16 * 1024 * 1024
    log_level: str = "INFO"
    
    def endpoint_url(self) -> str:
        """
        Derive the WebSocket endpoint from the page origin.
        
        The scheme is upgraded (http -> ws, https -> wss), the path is
        replaced by ``rpc_path`` and, in development mode, the port is
        forced to ``dev_port``.
        
        Raises:
            ConfigError: If the origin has no host
        """
        parsed = urlparse(self.origin if "//" in self.origin else f"//{self.origin}")
        if not parsed.netloc:
            raise ConfigError(
                f"Origin has no host: {self.origin!r}",
                details={'origin': self.origin}
            )
        
        scheme = parsed.scheme or "http"
        scheme = re.sub(r"^http", "ws", scheme)
        if scheme not in ("ws", "wss"):
            raise ConfigError(
                f"Unsupported origin scheme: {parsed.scheme}",
                details={'origin': self.origin}
            )
        
        netloc = parsed.netloc
        if self.development_mode:
            netloc = re.sub(r":\d+$", "", netloc) + f":{self.dev_port}"
        
        return urlunparse((scheme, netloc, self.rpc_path, "", "", ""))
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientConfig":
        """Build a config from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.debug(f"Ignoring unknown client config keys: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})
    
    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **defaults) -> "ClientConfig":
        """Build a config from ``PYVAULT_*`` environment variables layered over ``defaults``."""
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = dict(defaults)
        
        if env.get("PYVAULT_ORIGIN"):
            values['origin'] = env["PYVAULT_ORIGIN"]
        if "PYVAULT_DEV" in env:
            values['development_mode'] = env["PYVAULT_DEV"].strip().lower() in _TRUTHY
        if "PYVAULT_REJECT_PENDING_ON_CLOSE" in env:
            values['reject_pending_on_close'] = (
                env["PYVAULT_REJECT_PENDING_ON_CLOSE"].strip().lower() in _TRUTHY
            )
        if env.get("PYVAULT_LOG_LEVEL"):
            values['log_level'] = env["PYVAULT_LOG_LEVEL"]

        return cls.from_dict(values)
