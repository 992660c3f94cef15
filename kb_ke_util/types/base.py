"""
Base shapes shared by every parameter and output record.

Records are pydantic models that keep any key they do not declare in an open
map (`record.extra`), so fields added by newer service versions survive a
decode/encode cycle untouched. Declared fields are all optional: the client
never validates semantics locally, the service does.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from ..errors import SerializationError

R = TypeVar("R", bound="OpenRecord")


class OpenRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    @property
    def extra(self) -> Dict[str, Any]:
        """Live open map of the keys this record does not declare."""
        if self.__pydantic_extra__ is None:  # pragma: no cover - extra="allow" always sets it
            self.__pydantic_extra__ = {}
        return self.__pydantic_extra__

    def to_rpc_dict(self) -> Dict[str, Any]:
        # Unset declared fields are left off the wire; open-map nulls are kept.
        extra = self.extra
        return {k: v for k, v in self.model_dump().items() if v is not None or k in extra}

    @classmethod
    def from_rpc_dict(cls: Type[R], d: Any, *, method: Optional[str] = None) -> R:
        if not isinstance(d, Mapping):
            raise SerializationError(
                message=f"expected a JSON object for {cls.__name__}",
                method=method,
                detail=type(d).__name__,
            )
        try:
            return cls.model_validate(dict(d))
        except ValidationError as e:
            raise SerializationError(
                message=f"cannot decode {cls.__name__}",
                method=method,
                detail=str(e),
            ) from e

    @classmethod
    def coerce(cls: Type[R], value: Union[R, Mapping[str, Any]], *, method: Optional[str] = None) -> R:
        """Accept either a record instance or a plain mapping of its fields."""
        if isinstance(value, cls):
            return value
        return cls.from_rpc_dict(value, method=method)


class RpcContext(OpenRecord):
    """
    Call annotations sent alongside the positional params as the envelope's
    `context` member (never inside `params`).
    """

    call_stack: Optional[List[Dict[str, Any]]] = None
    run_id: Optional[str] = None


__all__ = ["OpenRecord", "RpcContext"]
