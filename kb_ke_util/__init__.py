"""
kb_ke_util client for Python.
Convenience exports for the typed client, its records and its errors.
"""

from .version import __version__  # noqa: F401

# Config, auth & errors
from .config import ConnectionConfig  # noqa: F401
from .auth import AuthToken, login, validate_token  # noqa: F401
from .errors import (  # noqa: F401
    KeUtilError,
    AuthorizationError,
    TransportError,
    InsecureTransportError,
    RemoteServiceError,
    SerializationError,
)

# Transport
from .rpc.http import JsonRpcCaller  # noqa: F401

# Records
from .types import *  # noqa: F401,F403
from .types import __all__ as _types_all

# Facade
from .client import KbKeUtilClient  # noqa: F401

__all__ = [
    "__version__",
    # Core
    "ConnectionConfig",
    "AuthToken", "login", "validate_token",
    "KeUtilError", "AuthorizationError", "TransportError", "InsecureTransportError",
    "RemoteServiceError", "SerializationError",
    # RPC
    "JsonRpcCaller", "KbKeUtilClient",
    # Records
    *_types_all,
]
