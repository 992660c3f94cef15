"""
Token handling against the KBase identity provider.

- validate_token(): GET  {auth}/api/V2/token            → {"user": ..., ...}
- login():          POST {auth}/api/legacy/KBase/Sessions/Login
                         (form user_id/password)         → {"token": ..., "user_id": ...}

Both return an `AuthToken`. A credential the provider rejects, or any
non-200 answer from it, raises AuthorizationError; failing to reach the
provider at all raises TransportError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .config import DEFAULT_AUTH_URL, ensure_scheme, is_plain_http
from .errors import AuthorizationError, InsecureTransportError, TransportError
from .version import user_agent

log = logging.getLogger(__name__)

TOKEN_PATH = "/api/V2/token"
LOGIN_PATH = "/api/legacy/KBase/Sessions/Login"


@dataclass(frozen=True)
class AuthToken:
    token: str
    user_name: Optional[str] = None

    def __repr__(self) -> str:
        return f"AuthToken(user_name={self.user_name!r}, token='***')"


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:256] or f"HTTP {resp.status_code}"
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    if isinstance(err, str):
        return err
    return f"HTTP {resp.status_code}"


def _send(
    method: str,
    url: str,
    *,
    headers: Dict[str, str],
    data: Optional[Dict[str, str]] = None,
    timeout_s: Optional[float],
    verify: bool,
    allow_insecure: bool,
    transport: Optional[httpx.BaseTransport],
) -> Dict[str, Any]:
    ensure_scheme(url)
    if is_plain_http(url) and not allow_insecure:
        raise InsecureTransportError(
            message="credentials must not be sent over plain http; allow insecure http explicitly",
            url=url,
        )
    merged = {"Accept": "application/json", "User-Agent": user_agent()}
    merged.update(headers)
    try:
        with httpx.Client(
            timeout=httpx.Timeout(None, read=timeout_s),
            verify=verify,
            transport=transport,
        ) as client:
            resp = client.request(method, url, headers=merged, data=data)
    except httpx.HTTPError as e:
        raise TransportError(message=f"auth service unreachable: {e}", url=url) from e

    if resp.status_code != 200:
        raise AuthorizationError(
            message=_error_message(resp), auth_url=url, http_status=resp.status_code
        )
    try:
        body = resp.json()
    except ValueError as e:
        raise TransportError(
            message="non-JSON response from auth service", url=url, http_status=resp.status_code
        ) from e
    if not isinstance(body, dict):
        raise AuthorizationError(message="unexpected auth service response", auth_url=url)
    return body


def validate_token(
    token: str,
    *,
    auth_url: str = DEFAULT_AUTH_URL,
    timeout_s: Optional[float] = None,
    verify: bool = True,
    allow_insecure: bool = False,
    transport: Optional[httpx.BaseTransport] = None,
) -> AuthToken:
    """Check `token` with the identity provider and return it with its user name."""
    if not token:
        raise AuthorizationError(message="empty token", auth_url=auth_url)
    url = auth_url.rstrip("/") + TOKEN_PATH
    log.debug("validating token against %s", url)
    body = _send(
        "GET",
        url,
        headers={"Authorization": token},
        timeout_s=timeout_s,
        verify=verify,
        allow_insecure=allow_insecure,
        transport=transport,
    )
    return AuthToken(token=token, user_name=body.get("user"))


def login(
    user: str,
    password: str,
    *,
    auth_url: str = DEFAULT_AUTH_URL,
    timeout_s: Optional[float] = None,
    verify: bool = True,
    allow_insecure: bool = False,
    transport: Optional[httpx.BaseTransport] = None,
) -> AuthToken:
    """Exchange a user name and password for a token."""
    if not user or not password:
        raise AuthorizationError(message="user name and password are required", auth_url=auth_url)
    url = auth_url.rstrip("/") + LOGIN_PATH
    log.debug("logging in %s via %s", user, url)
    body = _send(
        "POST",
        url,
        headers={},
        data={"user_id": user, "password": password, "fields": "token,user_id"},
        timeout_s=timeout_s,
        verify=verify,
        allow_insecure=allow_insecure,
        transport=transport,
    )
    token = body.get("token")
    if not token:
        raise AuthorizationError(message="auth service returned no token", auth_url=url)
    return AuthToken(token=str(token), user_name=body.get("user_id") or user)


__all__ = ["AuthToken", "validate_token", "login", "TOKEN_PATH", "LOGIN_PATH"]
