from __future__ import annotations

"""
HTTP JSON-RPC 1.1 caller (sync) for KBase SDK services.

- One httpx.Client per caller; rebuilt when certificate trust is toggled.
- The connection config is snapshotted at the start of every call.
- Exactly one round trip per call: no retries, no batching.

Example:
    from kb_ke_util.rpc.http import JsonRpcCaller
    rpc = JsonRpcCaller("https://kbase.us/services/kb_ke_util")
    res = rpc.call("kb_ke_util.status", [], auth_required=False)
    print(res[0]["state"])
"""

import dataclasses
import json
import logging
import time
from dataclasses import dataclass, field
from itertools import count
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Sequence, Union

import httpx

from ..auth import AuthToken
from ..config import ConnectionConfig, ensure_scheme, is_plain_http
from ..errors import (AuthorizationError, InsecureTransportError, SerializationError,
                      TransportError, from_jsonrpc_error)
from ..types.base import RpcContext
from ..version import user_agent

log = logging.getLogger(__name__)

JSON = Union[dict, list, str, int, float, bool, None]

RPC_VERSION = "1.1"

# Chunk size used when streaming request bodies.
STREAM_CHUNK = 64 * 1024


def _now_ms() -> int:
    return int(time.time() * 1000)


def _chunks(body: bytes, size: int = STREAM_CHUNK) -> Iterator[bytes]:
    for i in range(0, len(body), size):
        yield body[i : i + size]


def merge_context(contexts: Sequence[Optional[RpcContext]], service_version: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Fold call annotations into the envelope's `context` member. Later
    annotations win on key clashes; the version pin is applied last.
    """
    merged: Dict[str, Any] = {}
    for ctx in contexts:
        if ctx is None:
            continue
        if isinstance(ctx, Mapping):
            ctx = RpcContext.coerce(ctx)
        merged.update(ctx.to_rpc_dict())
    if service_version:
        merged["service_ver"] = service_version
    return merged or None


@dataclass
class JsonRpcCaller:
    """Synchronous JSON-RPC 1.1 client over HTTP with KBase token auth."""

    url: str
    token: Optional[AuthToken] = None
    config: Optional[ConnectionConfig] = None
    headers: Optional[Mapping[str, str]] = None
    transport: Optional[httpx.BaseTransport] = None
    _id_counter: Iterable[int] = field(default_factory=lambda: count(start=_now_ms()))
    _client: Optional[httpx.Client] = field(init=False, default=None)
    _client_verify: Optional[bool] = field(init=False, default=None)
    _response_file: Optional[Path] = field(init=False, default=None)

    def __post_init__(self) -> None:
        ensure_scheme(self.url)
        if self.config is None:
            self.config = ConnectionConfig(url=self.url)
        else:
            # Own copy; a config may be shared by callers with other urls.
            self.config = dataclasses.replace(self.config, url=self.url)

    # --- context manager -------------------------------------------------

    def __enter__(self) -> "JsonRpcCaller":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            self._client_verify = None

    # --- public API ------------------------------------------------------

    def set_file_for_next_rpc_response(self, path: Union[str, Path, None]) -> None:
        """Stream the next response body to `path` and decode it from there."""
        self._response_file = Path(path) if path is not None else None

    def call(
        self,
        method: str,
        params: Sequence[Any],
        *,
        auth_required: bool = True,
        context: Sequence[Optional[RpcContext]] = (),
        service_version: Optional[str] = None,
    ) -> JSON:
        """Perform a single JSON-RPC call and return its `result` member."""
        cfg = self.config.snapshot()
        self._check_policy(method, cfg, auth_required)
        ver = service_version if service_version is not None else cfg.service_version
        payload = self._make_payload(method, params, merge_context(context, ver))
        body = self._encode(method, payload)

        headers: Dict[str, str] = {}
        if self.token is not None:
            headers["Authorization"] = self.token.token

        response_file, self._response_file = self._response_file, None
        started = _now_ms()
        resp = self._send_once(method, body, headers, cfg, response_file)
        log.debug("%s id=%s took %dms", method, payload["id"], _now_ms() - started)
        return self._handle_response(method, resp)

    # --- internals -------------------------------------------------------

    def _check_policy(self, method: str, cfg: ConnectionConfig, auth_required: bool) -> None:
        if is_plain_http(self.url) and not cfg.insecure_http_allowed:
            raise InsecureTransportError(
                message=f"{method}: plain http is not allowed; use https or allow insecure http",
                url=self.url,
            )
        if auth_required and self.token is None:
            raise AuthorizationError(
                message=f"{method} requires authentication but no credential is configured"
            )
        if self.token is not None and is_plain_http(self.url):
            log.warning("sending auth token over plain http to %s", self.url)

    def _make_payload(self, method: str, params: Sequence[Any], context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "method": method,
            "params": list(params),
            "version": RPC_VERSION,
            "id": str(next(self._id_counter)),
        }
        if context:
            payload["context"] = context
        return payload

    def _encode(self, method: str, payload: Dict[str, Any]) -> bytes:
        try:
            return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(message="request is not JSON-serialisable", method=method, detail=str(e)) from e

    def _http(self, cfg: ConnectionConfig) -> httpx.Client:
        verify = not cfg.all_ssl_certificates_trusted
        if self._client is None or self._client_verify != verify:
            self.close()
            if not verify:
                log.warning("TLS certificate verification disabled for %s", self.url)
            merged_headers: Dict[str, str] = {
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": user_agent(),
            }
            if self.headers:
                merged_headers.update(dict(self.headers))
            self._client = httpx.Client(headers=merged_headers, verify=verify, transport=self.transport)
            self._client_verify = verify
        return self._client

    def _send_once(
        self,
        method: str,
        body: bytes,
        headers: Dict[str, str],
        cfg: ConnectionConfig,
        response_file: Optional[Path],
    ) -> httpx.Response:
        client = self._http(cfg)
        content: Union[bytes, Iterator[bytes]] = _chunks(body) if cfg.streaming_mode else body
        request = client.build_request(
            "POST",
            self.url,
            content=content,
            headers=headers,
            timeout=httpx.Timeout(None, read=cfg.read_timeout_s),
        )
        try:
            if response_file is None:
                return client.send(request)
            resp = client.send(request, stream=True)
            try:
                response_file.parent.mkdir(parents=True, exist_ok=True)
                with response_file.open("wb") as fh:
                    for chunk in resp.iter_bytes():
                        fh.write(chunk)
            except BaseException:
                response_file.unlink(missing_ok=True)
                raise
            finally:
                resp.close()
            # Body on disk is already content-decoded; only the media type carries over.
            return httpx.Response(
                resp.status_code,
                content=response_file.read_bytes(),
                headers={"Content-Type": resp.headers.get("Content-Type", "application/json")},
                request=request,
            )
        except httpx.TimeoutException as e:
            raise TransportError(message=f"{method}: timed out", url=self.url) from e
        except httpx.HTTPError as e:
            raise TransportError(message=f"{method}: {e}", url=self.url) from e

    def _handle_response(self, method: str, r: httpx.Response) -> JSON:
        try:
            resp = r.json()
        except ValueError as e:
            raise TransportError(
                message=f"{method}: non-JSON response",
                url=self.url,
                http_status=r.status_code,
            ) from e

        if isinstance(resp, dict) and resp.get("error") is not None:
            raise from_jsonrpc_error(resp["error"], method=method, http_status=r.status_code)
        if r.status_code >= 300:
            raise TransportError(
                message=f"{method}: unexpected HTTP status with body {r.text[:256]!r}",
                url=self.url,
                http_status=r.status_code,
            )
        if not isinstance(resp, dict) or "result" not in resp:
            raise SerializationError(message="response carries neither result nor error", method=method, detail=resp)
        return resp["result"]


__all__ = ["JsonRpcCaller", "merge_context", "RPC_VERSION"]
