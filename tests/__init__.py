"""
PyVault Test Suite

Unit tests for the envelope codec, the WebSocket connector, the request
multiplexer, the remote procedure surface and the session flows.
"""
