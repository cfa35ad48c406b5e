"""
PyVault JSON-RPC 2.0 Envelopes

This module encodes outgoing request envelopes and decodes the response
envelopes sent back by the vault backend.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pyvault.utils.errors import ProtocolAnomaly, ValidationError, handle_exception
from pyvault.utils.logging import get_logger

logger = get_logger(__name__)

JSONRPC_VERSION = "2.0"


@dataclass
class RPCMessage:
    """Base RPC message."""
    jsonrpc: str = JSONRPC_VERSION
    id: Optional[int] = None


@dataclass
class RPCRequest(RPCMessage):
    """RPC request message."""
    method: str = ""
    params: List[Any] = field(default_factory=list)


@dataclass
class RPCResponse(RPCMessage):
    """RPC success response message."""
    result: Optional[Any] = None
    
    @property
    def is_error(self) -> bool:
        return False


@dataclass
class RPCErrorResponse(RPCMessage):
    """RPC error response message."""
    error: Dict[str, Any] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)
    
    @property
    def is_error(self) -> bool:
        return True


# Code given to error members that are not objects
INTERNAL_ERROR = -32603


class JSONRPCProtocol:
    """
    JSON-RPC 2.0 envelope codec.
    
    Requests always carry positional ``params``. Responses are routed by
    ``id`` only: a message whose id is not a positive integer is not
    correlatable. A present, non-null ``error`` member marks a failure.
    """
    
    @handle_exception
    def create_request(self, method: str, params: Optional[List[Any]], request_id: int) -> str:
        """
        Create JSON-RPC request message.
        
        Args:
            method: Method name
            params: Positional method parameters
            request_id: Correlation id
            
        Returns:
            JSON-encoded request message
        """
        if not isinstance(method, str) or not method:
            raise ValidationError(f"Invalid method name: {method!r}")
        
        request = RPCRequest(
            id=request_id,
            method=method,
            params=list(params or [])
        )
        return self._serialize({
            'jsonrpc': request.jsonrpc,
            'id': request.id,
            'method': request.method,
            'params': request.params,
        })
    
    def parse_response(self, message_data: Union[str, bytes]) -> Union[RPCResponse, RPCErrorResponse]:
        """
        Decode an inbound response envelope.
        
        Raises:
            ProtocolAnomaly: If the message is not JSON, not an object,
                or carries no usable correlation id
        """
        try:
            data = json.loads(message_data)
        except (TypeError, ValueError) as e:
            raise ProtocolAnomaly(f"Response is not valid JSON: {e}", message_data) from e
        
        if not isinstance(data, dict):
            raise ProtocolAnomaly("Response is not a JSON object", data)
        
        request_id = data.get('id')
        if type(request_id) is not int or request_id <= 0:
            raise ProtocolAnomaly("Response without usable id", data)
        
        if data.get('error') is not None:
            error = data['error']
            if not isinstance(error, dict):
                logger.warning(f"Non-object error in response {request_id}: {error!r}")
                error = {'code': INTERNAL_ERROR, 'message': str(error)}
            return RPCErrorResponse(
                jsonrpc=data.get('jsonrpc', JSONRPC_VERSION),
                id=request_id,
                error=error,
                raw=data
            )
        
        return RPCResponse(
            jsonrpc=data.get('jsonrpc', JSONRPC_VERSION),
            id=request_id,
            result=data.get('result')
        )
    
    def _serialize(self, data: Dict[str, Any]) -> str:
        try:
            return json.dumps(data, separators=(',', ':'))
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Failed to serialize message: {str(e)}") from e
