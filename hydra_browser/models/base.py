"""
Shared pydantic base for models that round-trip through camelCase JSON documents.
"""

from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input; dumps camelCase for persistence."""

    class Config:
        """Pydantic model configuration."""

        alias_generator = to_camel
        populate_by_name = True
        validate_assignment = True
        str_strip_whitespace = True

    def to_document(self) -> dict[str, Any]:
        """Returns the JSON-ready, camelCase representation of this model."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
