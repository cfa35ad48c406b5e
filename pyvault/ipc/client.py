"""
PyVault JSON-RPC Client

Multiplexes concurrent calls over the single Connector-managed WebSocket.
Every call gets a fresh correlation id; replies settle the matching pending
call in whatever order they arrive.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from .protocol import JSONRPCProtocol
from .transport import Connector
from pyvault.utils.config import ClientConfig
from pyvault.utils.errors import ApplicationError, IPCError, ProtocolAnomaly, RemoteClose
from pyvault.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PendingRequest:
    """An issued call awaiting its correlated response."""
    
    id: int
    method: str
    future: asyncio.Future


class Client:
    """
    JSON-RPC client for the vault backend.
    
    Pending requests are only removed by a matching reply, by a failed
    send, or, when ``reject_pending_on_close`` is set, by the connection
    going away. Otherwise a request whose reply never comes stays pending.
    """
    
    def __init__(
        self,
        url: str,
        *,
        reject_pending_on_close: bool = False,
        connect_factory: Optional[Callable[..., Any]] = None,
        **connect_options
    ):
        """
        Initialize client.
        
        Args:
            url: WebSocket endpoint of the backend
            reject_pending_on_close: Fail in-flight calls when the socket closes
            connect_factory: Socket opener handed to the Connector
            **connect_options: Socket options handed to the Connector
        """
        self.protocol = JSONRPCProtocol()
        self.pending: Dict[int, PendingRequest] = {}
        self.reject_pending_on_close = reject_pending_on_close
        self._next_id = 1
        
        self.connector = Connector(
            url,
            self._on_message,
            on_close=self._on_close,
            connect_factory=connect_factory,
            **connect_options
        )
        
        logger.debug(f"Client initialized: {url}")
    
    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs) -> "Client":
        """Create a client for the endpoint described by ``config``."""
        return cls(
            config.endpoint_url(),
            reject_pending_on_close=config.reject_pending_on_close,
            open_timeout=config.open_timeout,
            max_size=config.max_message_size,
            **kwargs
        )
    
    @property
    def pending_count(self) -> int:
        return len(self.pending)
    
    def _allocate_id(self) -> int:
        request_id = self._next_id
        self._next_id += 1
        return request_id
    
    async def call(self, method: str, *params: Any) -> Any:
        """
        Call a remote procedure and wait for its result.
        
        Args:
            method: Remote procedure name
            *params: Positional JSON-serializable arguments
            
        Returns:
            The ``result`` field of the matching reply
            
        Raises:
            ApplicationError: If the backend replied with an error
            ConnectFailure: If no connection could be opened
            RemoteClose: If the socket closed before the call was sent,
                or while pending when ``reject_pending_on_close`` is set
        """
        # Ids follow call order even when connecting suspends the caller
        request_id = self._allocate_id()
        payload = self.protocol.create_request(method, list(params), request_id)
        
        connection = await self.connector.get_connection()
        
        future = asyncio.get_running_loop().create_future()
        self.pending[request_id] = PendingRequest(request_id, method, future)
        
        try:
            await self.connector.send(connection, payload)
        except IPCError:
            if self.pending.pop(request_id, None) is None and future.done() and not future.cancelled():
                future.exception()
            raise
        
        logger.debug(f"Sent request {request_id}: {method}")
        return await future
    
    def _on_message(self, message: Union[str, bytes]) -> None:
        try:
            response = self.protocol.parse_response(message)
        except ProtocolAnomaly as e:
            logger.error(f"{e.message}: {e.payload!r}")
            return
        
        entry = self.pending.pop(response.id, None)
        if entry is None:
            logger.warning(f"Received response for unknown request: {response.id}")
            return
        
        if entry.future.done():
            # Caller stopped waiting
            logger.debug(f"Dropping response for abandoned request {entry.id}")
            return
        
        if response.is_error:
            logger.debug(f"Request {entry.id} ({entry.method}) failed: {response.error}")
            entry.future.set_exception(ApplicationError(response.raw))
        else:
            logger.debug(f"Request {entry.id} ({entry.method}) completed")
            entry.future.set_result(response.result)
    
    def _on_close(self, close: RemoteClose) -> None:
        if not self.pending:
            return
        
        if not self.reject_pending_on_close:
            logger.warning(
                f"Connection closed with {len(self.pending)} pending request(s) left unsettled"
            )
            return
        
        pending, self.pending = self.pending, {}
        logger.warning(f"Connection closed, rejecting {len(pending)} pending request(s)")
        for entry in pending.values():
            if not entry.future.done():
                entry.future.set_exception(RemoteClose(
                    close.message,
                    code=close.code,
                    reason=close.reason,
                    details={'request_id': entry.id, 'method': entry.method}
                ))
    
    async def close(self) -> None:
        """Close the underlying connection."""
        await self.connector.close()
