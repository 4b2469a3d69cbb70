"""
Cœur métier de NIM Proxy.
Modules indépendants sans dépendances externes au package.
"""

from .exceptions import (
    NimProxyError,
    ConfigurationError,
    InvalidRequestError,
    UpstreamHTTPError,
    StreamingError,
)
from .constants import (
    DEFAULT_NIM_API_BASE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_TEMPERATURE,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL_MAPPING,
    DEFAULT_UNBOUNDED_LATENCY_MODELS,
)
from .models import (
    ChatRequest,
    BackendRequest,
    ChoiceDelta,
    Usage,
    ErrorEnvelope,
)

__all__ = [
    # Exceptions
    "NimProxyError",
    "ConfigurationError",
    "InvalidRequestError",
    "UpstreamHTTPError",
    "StreamingError",
    # Constants
    "DEFAULT_NIM_API_BASE",
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_MODEL_MAPPING",
    "DEFAULT_UNBOUNDED_LATENCY_MODELS",
    # Models
    "ChatRequest",
    "BackendRequest",
    "ChoiceDelta",
    "Usage",
    "ErrorEnvelope",
]
