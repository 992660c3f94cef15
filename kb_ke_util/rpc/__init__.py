"""
kb_ke_util.rpc
--------------

JSON-RPC transport. `JsonRpcCaller` owns the HTTP connection, the
credential and the connection config; the typed facade in
`kb_ke_util.client` is built on top of it.

    from kb_ke_util.rpc import JsonRpcCaller
    rpc = JsonRpcCaller(url="https://kbase.us/services/kb_ke_util")
"""

from __future__ import annotations

from .http import RPC_VERSION, JsonRpcCaller, merge_context

__all__ = ["JsonRpcCaller", "merge_context", "RPC_VERSION"]
