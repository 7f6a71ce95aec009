"""Shared Pydantic schema bases."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Schemas whose JSON keys are camelCase (login profile, employee listing)."""

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class RecordModel(BaseModel):
    """Schemas that mirror database rows and keep snake_case keys."""

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    """Health-check response returned by /health."""
    ok: bool = True
    now: datetime
