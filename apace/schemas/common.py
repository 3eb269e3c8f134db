from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for request/response bodies exchanged in camelCase."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}


class Envelope(BaseModel, Generic[T]):
    status: str = "success"
    message: Optional[str] = None
    data: Optional[T] = None
    pagination: Optional[Dict[str, Any]] = None


class MessageResponse(BaseModel):
    status: str = "success"
    message: str
