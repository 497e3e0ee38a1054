"""
Base models and aliases shared by the schema modules.

Two bases, one per direction of data:
- PermissiveModel for records read from conversation files (conversation.py)
- BaseStrictModel for results the services build themselves (operations.py)
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, TypeAlias

import pydantic


class BaseStrictModel(pydantic.BaseModel):
    """Immutable model that rejects unknown fields and type coercion."""

    model_config = pydantic.ConfigDict(
        extra='forbid',
        strict=True,
        frozen=True,
    )


class PermissiveModel(pydantic.BaseModel):
    """
    Immutable model for JSONL records written by Claude Code.

    Known fields are validated strictly. Unknown ones (usage, version,
    userType, toolUseResult, ...) are kept as extras and serialized back
    out, so rewriting a file never loses data.
    """

    model_config = pydantic.ConfigDict(
        extra='allow',
        strict=True,
        frozen=True,
    )

    def get_extra_fields(self) -> dict[str, object]:
        """Fields present in the source line but not declared on the model."""
        return dict(self.__pydantic_extra__) if self.__pydantic_extra__ else {}


JsonDatetime: TypeAlias = Annotated[datetime, pydantic.Field(strict=False)]
"""Datetime that also accepts ISO strings (backup-info.json round-trips)."""

PathStr: TypeAlias = str
"""A filesystem path stored as a string."""
