"""
Logique de proxy HTTP vers l'API NVIDIA NIM.
"""

from .router import resolve_model, get_chat_completions_url
from .transformers import (
    build_backend_request,
    reshape_response,
    resolve_streaming,
    resolve_timeout,
)
from .stream import (
    SSELineBuffer,
    StreamTranscoder,
    stream_generator,
)
from .errors import map_error, not_found_envelope
from .client import create_proxy_client, ProxyClient

__all__ = [
    "resolve_model",
    "get_chat_completions_url",
    "build_backend_request",
    "reshape_response",
    "resolve_streaming",
    "resolve_timeout",
    "SSELineBuffer",
    "StreamTranscoder",
    "stream_generator",
    "map_error",
    "not_found_envelope",
    "create_proxy_client",
    "ProxyClient",
]
