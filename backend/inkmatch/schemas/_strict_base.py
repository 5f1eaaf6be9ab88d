"""Strict schema baselines with forbidden extras by default."""

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Response DTO base; camelCase aliases are accepted alongside field names."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class StrictRequestModel(StrictModel):
    """Request DTO base that always forbids unexpected fields."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)
