from decimal import Decimal
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, PlainSerializer

T = TypeVar("T")

# Quantities and money stay Decimal in Python and render as JSON numbers.
DecimalNumber = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ListResponse(BaseModel, Generic[T]):
    items: list[T]
    count: int
    limit: int
    offset: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str
