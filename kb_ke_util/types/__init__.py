"""
kb_ke_util.types
----------------

Typed records exchanged with the service. Each operation has one parameter
record and one output record; all share the open-map behaviour of
`OpenRecord`.
"""

from __future__ import annotations

from .base import OpenRecord, RpcContext
from .records import *  # noqa: F401,F403
from .records import __all__ as _records_all

__all__ = ["OpenRecord", "RpcContext", *_records_all]
