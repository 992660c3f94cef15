"""
Version of the kb_ke_util Python client.

The module name reported to the service lives here as well, since every RPC
method name is namespaced by it.
"""

from __future__ import annotations

# Bump this when publishing
__version__ = "0.1.0"

SERVICE_NAME = "kb_ke_util"


def user_agent() -> str:
    return f"kb-ke-util-python/{__version__}"


__all__ = ["__version__", "SERVICE_NAME", "user_agent"]
