# devlog/schemas/base.py
"""
Shared pydantic base for API schemas.

Fields are declared in snake_case and serialized in camelCase, which is the
wire format device clients and the dashboard already speak.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )
