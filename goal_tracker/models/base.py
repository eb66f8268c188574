"""Shared model configuration."""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys (storage and API)."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
