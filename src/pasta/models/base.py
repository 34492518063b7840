# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for pasta."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, JsonValue
from typing_extensions import TypeAlias

JSONValue: TypeAlias = JsonValue
JSONObject: TypeAlias = dict[str, JSONValue]


class PastaBaseModel(BaseModel):
    """Base model with shared config for pasta schemas."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )
