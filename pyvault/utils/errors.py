"""
PyVault exception classes

This module defines the exceptions raised by the vault client. Transport
failures (ConnectFailure, RemoteClose) and application failures
(ApplicationError) share one hierarchy so callers can catch them uniformly.
"""

import functools
from typing import Any, Optional


class PyVaultError(Exception):
    """Base exception for all PyVault errors"""
    
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class IPCError(PyVaultError):
    """Errors related to the connection with the vault backend"""
    pass


class ConnectFailure(IPCError):
    """The socket failed to open."""
    
    def __init__(self, message: str, error: Optional[BaseException] = None,
                 details: Optional[dict] = None):
        super().__init__(message, details)
        self.error = error


class RemoteClose(IPCError):
    """The socket closed before or while it was connected."""
    
    def __init__(self, message: str, code: Optional[int] = None,
                 reason: str = "", details: Optional[dict] = None):
        super().__init__(message, details)
        self.code = code
        self.reason = reason


class ProtocolAnomaly(IPCError):
    """An inbound message that cannot be routed to a pending request."""
    
    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class ConfigError(PyVaultError):
    """Errors related to configuration management"""
    pass


class ValidationError(PyVaultError):
    """Errors related to input validation"""
    pass


class RPCError(PyVaultError):
    """Errors related to JSON-RPC communication"""
    
    def __init__(self, message: str, code: int = -32603, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data
    
    def to_dict(self) -> dict:
        """Convert to JSON-RPC error format."""
        error_dict = {
            'code': self.code,
            'message': self.message
        }
        if self.data is not None:
            error_dict['data'] = self.data
        return error_dict


class ApplicationError(RPCError):
    """
    The backend answered a call with an error object.
    
    The raw response envelope is kept in ``response`` so presentation code
    can inspect everything the backend sent.
    """
    
    def __init__(self, response: dict):
        error = response.get('error') or {}
        if not isinstance(error, dict):
            error = {'message': str(error)}
        super().__init__(
            error.get('message', 'Unknown error'),
            error.get('code', -1),
            error.get('data')
        )
        self.response = response
    
    @property
    def kind(self) -> Optional[str]:
        """Backend error kind from ``error.data.kind``, if any."""
        if isinstance(self.data, dict):
            kind = self.data.get('kind')
            if isinstance(kind, str):
                return kind
        return None


def handle_exception(func):
    """
    Decorator to handle exceptions and convert them to PyVault exceptions
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PyVaultError:
            # Re-raise PyVault exceptions as-is
            raise
        except Exception as e:
            raise PyVaultError(
                f"Unexpected error in {func.__name__}: {str(e)}",
                details={'original_exception': type(e).__name__}
            ) from e
    return wrapper


def handle_async_exception(func):
    """
    Async decorator to handle exceptions and convert them to PyVault exceptions
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PyVaultError:
            raise
        except Exception as e:
            raise PyVaultError(
                f"Unexpected error in {func.__name__}: {str(e)}",
                details={'original_exception': type(e).__name__}
            ) from e
    return wrapper
