"""
Connection configuration: service endpoint, auth endpoint, timeouts and
transport policy flags.

- Defaults are safe: https only, certificates verified, buffered requests.
- Supports overrides via environment variables (KB_KE_UTIL_*).
- The transport takes a snapshot of the config at the start of every call,
  so mutating it only affects calls issued afterwards.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

DEFAULT_URL = "https://kbase.us/services/kb_ke_util"
DEFAULT_AUTH_URL = "https://kbase.us/services/auth"

TOKEN_ENV = "KB_AUTH_TOKEN"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _env_bool(name: str, default: bool) -> bool:
    v = _env(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def parse_timeout_ms(val: Any) -> Optional[int]:
    """
    Accepts None, int, integral float or decimal str. Zero and None both mean
    "no timeout". Booleans and fractional milliseconds are rejected.
    """
    if val is None or val == "":
        return None
    if isinstance(val, bool):
        raise ValueError(f"read timeout must be a number of ms, got {val!r}")
    if isinstance(val, float):
        if not val.is_integer():
            raise ValueError(f"read timeout must be a whole number of ms, got {val!r}")
        ms = int(val)
    else:
        ms = int(val) if isinstance(val, int) else int(str(val).strip())
    if ms < 0:
        raise ValueError(f"read timeout must be >= 0 ms, got {ms}")
    return ms or None


def ensure_scheme(url: Optional[str], allowed: tuple[str, ...] = ("http", "https")) -> Optional[str]:
    if not url:
        return url
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ValueError(f"URL must start with {allowed}, got: {url!r}")
    return url


def is_plain_http(url: str) -> bool:
    return url.lower().startswith("http://")


@dataclass(slots=True)
class ConnectionConfig:
    # Endpoints
    url: str = field(default_factory=lambda: DEFAULT_URL)
    auth_url: str = field(default_factory=lambda: DEFAULT_AUTH_URL)
    # Transport behaviour
    read_timeout_ms: Optional[int] = None
    insecure_http_allowed: bool = False
    all_ssl_certificates_trusted: bool = False
    streaming_mode: bool = False
    # Dispatch
    service_version: Optional[str] = None

    def __post_init__(self) -> None:
        ensure_scheme(self.url)
        ensure_scheme(self.auth_url)
        self.read_timeout_ms = parse_timeout_ms(self.read_timeout_ms)

    @classmethod
    def from_env(cls, prefix: str = "KB_KE_UTIL_") -> "ConnectionConfig":
        """
        Create config from environment variables:

        KB_KE_UTIL_URL              (http/https)
        KB_KE_UTIL_AUTH_URL         (http/https)
        KB_KE_UTIL_TIMEOUT_MS       (int milliseconds, 0 = none)
        KB_KE_UTIL_INSECURE_HTTP    (bool)
        KB_KE_UTIL_TRUST_ALL_CERTS  (bool)
        KB_KE_UTIL_STREAMING        (bool)
        KB_KE_UTIL_SERVICE_VERSION  (str)
        """
        return cls(
            url=_env(f"{prefix}URL") or DEFAULT_URL,
            auth_url=_env(f"{prefix}AUTH_URL") or DEFAULT_AUTH_URL,
            read_timeout_ms=parse_timeout_ms(_env(f"{prefix}TIMEOUT_MS")),
            insecure_http_allowed=_env_bool(f"{prefix}INSECURE_HTTP", False),
            all_ssl_certificates_trusted=_env_bool(f"{prefix}TRUST_ALL_CERTS", False),
            streaming_mode=_env_bool(f"{prefix}STREAMING", False),
            service_version=_env(f"{prefix}SERVICE_VERSION") or None,
        )

    @classmethod
    def with_overrides(
        cls, base: Optional["ConnectionConfig"] = None, **overrides: Any
    ) -> "ConnectionConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys are ignored; None overrides leave the base value alone.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data and v is not None})
        return cls(**data)

    def snapshot(self) -> "ConnectionConfig":
        return dataclasses.replace(self)

    @property
    def read_timeout_s(self) -> Optional[float]:
        if not self.read_timeout_ms:
            return None
        return self.read_timeout_ms / 1000.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "auth_url": self.auth_url,
            "read_timeout_ms": self.read_timeout_ms,
            "insecure_http_allowed": bool(self.insecure_http_allowed),
            "all_ssl_certificates_trusted": bool(self.all_ssl_certificates_trusted),
            "streaming_mode": bool(self.streaming_mode),
            "service_version": self.service_version,
        }


__all__ = [
    "ConnectionConfig",
    "DEFAULT_URL",
    "DEFAULT_AUTH_URL",
    "TOKEN_ENV",
    "ensure_scheme",
    "parse_timeout_ms",
    "is_plain_http",
]
