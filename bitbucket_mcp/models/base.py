"""Base model for Bitbucket Server REST payloads."""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    """Upstream JSON object.

    Fields use snake_case in Python and camelCase on the wire. Unknown
    keys are kept, and only keys that were present are written back, so
    a model parsed from a response dumps to the same JSON.
    """

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "extra": "allow"}

    def to_payload(self) -> Dict[str, Any]:
        """Serialize with upstream key names, omitting unset fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class Page(ApiModel, Generic[T]):
    """One page of a paginated list endpoint.

    nextPageStart is absent on the last page.
    """

    is_last_page: bool = True
    limit: int = 25
    next_page_start: Optional[int] = None
    size: int = 0
    start: int = 0
    values: List[T] = Field(default_factory=list)
