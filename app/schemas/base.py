"""
app/schemas/base.py

Shared Pydantic base for scorecard request and response models.

Field names stay snake_case in Python and are exposed as camelCase on the
wire.  Incoming bodies are accepted in either form.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from scorecard.periods import MONTH_ID_PATTERN


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


__all__ = ["CamelModel", "MONTH_ID_PATTERN"]
