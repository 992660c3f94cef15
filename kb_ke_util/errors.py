"""
Typed error classes for the kb_ke_util client.

Every failure raised by the facade, the transport or the auth helpers is one
of these, so callers can catch a specific failure mode or the base
`KeUtilError`. The client never retries or swallows them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional

__all__ = [
    "KeUtilError",
    "AuthorizationError",
    "TransportError",
    "InsecureTransportError",
    "RemoteServiceError",
    "SerializationError",
    "JsonRpcCode",
    "from_jsonrpc_error",
]


class KeUtilError(Exception):
    """Base class for all client errors."""


class JsonRpcCode(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Generic server-side failure reported by KBase SDK services
    SERVER_ERROR = -32500


@dataclass(slots=True, eq=False)
class AuthorizationError(KeUtilError):
    """Raised when a credential is rejected, or missing for a call that needs one."""

    message: str
    auth_url: Optional[str] = None
    http_status: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        parts = [self.message]
        if self.auth_url:
            parts.append(f"auth={self.auth_url}")
        if self.http_status is not None:
            parts.append(f"http={self.http_status}")
        return "AuthorizationError: " + " ".join(parts)


@dataclass(slots=True, eq=False)
class TransportError(KeUtilError):
    """
    Raised when the HTTP exchange itself fails: connection refused, read
    timeout, TLS failure, or a response body that is not JSON.
    """

    message: str
    url: Optional[str] = None
    http_status: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        bits = [self.message]
        if self.url:
            bits.append(f"url={self.url}")
        if self.http_status is not None:
            bits.append(f"http={self.http_status}")
        return "TransportError: " + " ".join(bits)


@dataclass(slots=True, eq=False)
class InsecureTransportError(TransportError):
    """Raised before any I/O when a plain http:// URL is used without opting in."""


@dataclass(slots=True, eq=False)
class RemoteServiceError(KeUtilError):
    """Raised when the service answers with a JSON-RPC error object."""

    method: Optional[str]
    code: int
    message: str
    name: Optional[str] = None
    trace: Optional[str] = None
    http_status: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        parts = [f"RPC[{self.method or '-'}] code={self.code} msg={self.message!r}"]
        if self.name:
            parts.append(f"name={self.name}")
        if self.http_status is not None:
            parts.append(f"http={self.http_status}")
        return " ".join(parts)

    @property
    def code_enum(self) -> Optional[JsonRpcCode]:
        try:
            return JsonRpcCode(self.code)
        except ValueError:
            return None


@dataclass(slots=True, eq=False)
class SerializationError(KeUtilError):
    """
    Raised when a record cannot be encoded, or a response does not honour the
    one-element result contract. Treat as a bug on one side of the wire.
    """

    message: str
    method: Optional[str] = None
    detail: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = f" [{self.method}]" if self.method else ""
        extra = f": {self.detail!r}" if self.detail is not None else ""
        return f"SerializationError{where}: {self.message}{extra}"


def from_jsonrpc_error(
    err_obj: Any,
    *,
    method: Optional[str] = None,
    http_status: Optional[int] = None,
) -> RemoteServiceError:
    """
    Convert a JSON-RPC error member into RemoteServiceError.

    KBase services send {"name": str, "code": int, "message": str, "error": str},
    where "error" carries the server-side stack trace. JSON-RPC 2.0 style
    {"code", "message", "data"} is accepted as well.
    """
    if not isinstance(err_obj, dict):
        return RemoteServiceError(
            method=method,
            code=int(JsonRpcCode.SERVER_ERROR),
            message=str(err_obj),
            http_status=http_status,
        )
    err: Dict[str, Any] = err_obj
    try:
        code = int(err.get("code", JsonRpcCode.SERVER_ERROR))
    except (TypeError, ValueError):
        code = int(JsonRpcCode.SERVER_ERROR)
    trace = err.get("error", err.get("data"))
    return RemoteServiceError(
        method=method,
        code=code,
        message=str(err.get("message", "Unknown JSON-RPC error")),
        name=err.get("name"),
        trace=None if trace is None else str(trace),
        http_status=http_status,
    )
