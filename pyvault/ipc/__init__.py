"""
PyVault IPC

JSON-RPC 2.0 over a WebSocket to the vault backend: envelope codec,
connection lifecycle and request multiplexing.
"""

from .protocol import JSONRPCProtocol, RPCRequest, RPCResponse, RPCErrorResponse
from .transport import Connector, ConnectionState
from .client import Client, PendingRequest

__all__ = [
    'JSONRPCProtocol',
    'RPCRequest',
    'RPCResponse',
    'RPCErrorResponse',
    'Connector',
    'ConnectionState',
    'Client',
    'PendingRequest',
]
