"""
PyVault WebSocket Connector

This module owns the single WebSocket to the vault backend and its
three-state lifecycle. Connections are opened on demand and every inbound
message is handed to one registered handler.
"""

import asyncio
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

import websockets
from websockets.exceptions import ConnectionClosed

from pyvault.utils.errors import ConnectFailure, IPCError, RemoteClose
from pyvault.utils.logging import get_logger

logger = get_logger(__name__)

MessageHandler = Callable[[Union[str, bytes]], None]
CloseHandler = Callable[[RemoteClose], None]


class ConnectionState(Enum):
    """Lifecycle of the backend connection."""
    DISCONNECTED = 0
    CONNECTING = 1
    CONNECTED = 2


def _close_details(exc: ConnectionClosed) -> Tuple[Optional[int], str]:
    frame = exc.rcvd or exc.sent
    if frame is None:
        return None, ""
    return frame.code, frame.reason


class Connector:
    """
    Lazily opened, demand-reconnected WebSocket.
    
    There is no background reconnect: after an error or close the state
    returns to DISCONNECTED and the next ``get_connection`` opens a new
    socket. Callers arriving while a connect is underway share its outcome.
    """
    
    def __init__(
        self,
        url: str,
        on_message: MessageHandler,
        *,
        on_close: Optional[CloseHandler] = None,
        connect_factory: Optional[Callable[..., Any]] = None,
        **connect_options
    ):
        """
        Initialize connector.
        
        Args:
            url: WebSocket endpoint
            on_message: Handler receiving every inbound message
            on_close: Called when a live connection goes away
            connect_factory: Socket opener, ``websockets.connect`` by default
            **connect_options: Passed through to ``connect_factory``
        """
        self.url = url
        self.on_message = on_message
        self.on_close = on_close
        self.state = ConnectionState.DISCONNECTED
        self.ws: Optional[Any] = None
        self.connect_attempts = 0
        
        self._connect_factory = connect_factory or websockets.connect
        self._connect_options: Dict[str, Any] = {
            k: v for k, v in connect_options.items() if v is not None
        }
        self._connecting: Optional[asyncio.Task] = None
        self._reader_task: Optional[asyncio.Task] = None
        
        logger.debug(f"Connector initialized: {url}")
    
    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED
    
    async def get_connection(self):
        """
        Get the live connection, opening one if needed.
        
        Raises:
            ConnectFailure: If the socket could not be opened
            RemoteClose: If the socket closed before the open completed
        """
        if self.state is ConnectionState.CONNECTED:
            return self.ws
        
        if self.state is ConnectionState.CONNECTING and self._connecting is not None:
            logger.debug("Connect already in progress, waiting for it")
            return await self._wait_open(self._connecting)
        
        return await self.connect()
    
    async def connect(self):
        """
        Open a new connection.
        
        Only valid while DISCONNECTED; use ``get_connection`` otherwise.
        """
        if self.state is not ConnectionState.DISCONNECTED:
            raise IPCError(
                f"Cannot connect while {self.state.name.lower()}",
                details={'url': self.url}
            )
        
        self.state = ConnectionState.CONNECTING
        self.connect_attempts += 1
        
        task = asyncio.ensure_future(self._open())
        task.add_done_callback(_consume_exception)
        self._connecting = task
        
        return await self._wait_open(task)
    
    async def _wait_open(self, task: asyncio.Task):
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
            # The open was aborted by close(), not the waiting caller
            raise RemoteClose(
                f"Connection closed before opening: {self.url}",
                details={'url': self.url}
            ) from None
    
    async def _open(self):
        logger.info(f"Connecting to {self.url}")
        try:
            ws = await self._connect_factory(self.url, **self._connect_options)
        except ConnectionClosed as e:
            self._abandon_open()
            code, reason = _close_details(e)
            logger.warning(f"Connection to {self.url} closed before opening (code={code})")
            raise RemoteClose(
                f"Connection closed before opening: {self.url}",
                code=code,
                reason=reason,
                details={'url': self.url}
            ) from e
        except asyncio.CancelledError:
            self._abandon_open()
            raise
        except Exception as e:
            self._abandon_open()
            logger.warning(f"Failed to connect to {self.url}: {e}")
            raise ConnectFailure(
                f"Failed to connect to {self.url}: {str(e)}",
                error=e,
                details={'url': self.url, 'error': type(e).__name__}
            ) from e
        
        # Reader starts before the state flips so no message can be missed
        self.ws = ws
        self._reader_task = asyncio.create_task(self._read_loop(ws))
        self.state = ConnectionState.CONNECTED
        self._connecting = None
        
        logger.info(f"Connected to {self.url}")
        return ws
    
    async def send(self, connection, message: str) -> None:
        """
        Send one message over ``connection``.
        
        Raises:
            RemoteClose: If the socket is already closed
        """
        try:
            await connection.send(message)
        except ConnectionClosed as e:
            code, reason = _close_details(e)
            raise RemoteClose(
                f"Connection closed while sending: {self.url}",
                code=code,
                reason=reason,
                details={'url': self.url}
            ) from e
    
    async def _read_loop(self, ws) -> None:
        close: Optional[RemoteClose] = None
        try:
            async for message in ws:
                self._dispatch(message)
            close = RemoteClose(
                f"Connection closed: {self.url}",
                code=getattr(ws, 'close_code', None),
                reason=getattr(ws, 'close_reason', None) or ""
            )
        except ConnectionClosed as e:
            code, reason = _close_details(e)
            close = RemoteClose(f"Connection lost: {self.url}", code=code, reason=reason)
        except Exception as e:
            logger.error(f"Socket error on {self.url}: {e}")
            close = RemoteClose(
                f"Socket error on {self.url}: {str(e)}",
                details={'error': type(e).__name__}
            )
        finally:
            if self.ws is ws:
                self.ws = None
                self.state = ConnectionState.DISCONNECTED
        
        logger.info(f"Disconnected from {self.url} (code={close.code})")
        if self.on_close is not None:
            try:
                self.on_close(close)
            except Exception as e:
                logger.error(f"Close handler error: {e}")
    
    def _dispatch(self, message: Union[str, bytes]) -> None:
        try:
            self.on_message(message)
        except Exception as e:
            logger.error(f"Message handler error: {e}")
    
    def _reset(self) -> None:
        self.ws = None
        self.state = ConnectionState.DISCONNECTED
        self._connecting = None
    
    def _abandon_open(self) -> None:
        # A newer open may already own the state after close()
        if self._connecting is asyncio.current_task():
            self._reset()
    
    async def close(self) -> None:
        """Close the connection and wait for the reader to finish."""
        connecting = self._connecting
        if connecting is not None and not connecting.done():
            connecting.cancel()
            await asyncio.wait({connecting})
        
        ws = self.ws
        if ws is not None:
            await ws.close()
        
        reader = self._reader_task
        if reader is not None and reader is not asyncio.current_task():
            try:
                await reader
            except asyncio.CancelledError:
                pass
        self._reader_task = None
        
        self._reset()
        logger.debug("Connector closed")


def _consume_exception(task: asyncio.Task) -> None:
    # Connect outcomes are reported to the awaiting callers
    if not task.cancelled():
        task.exception()
