"""Shared pydantic base for models that travel over the wire."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Serializes with camelCase keys, accepts camelCase or snake_case input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self, exclude_none: bool = False) -> dict:
        """Dump to a JSON-ready dict using the camelCase aliases."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)
