# eniqilo_store/models/filter.py
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_LIMIT = 5
DEFAULT_OFFSET = 0

class FilterCriteria(BaseModel):
    """Optional listing criteria as received from a caller.

    Values are kept loose on purpose: category and price_sort stay raw
    strings and are checked by the query compiler, which drops anything
    outside its closed set. Malformed limit/offset/in_stock values fall
    back to their defaults instead of raising. Unknown keys are ignored.
    """
    name: Optional[str] = None
    category: Optional[str] = None
    price_sort: Optional[str] = None
    in_stock: Optional[bool] = None
    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("name", "category", "price_sort", mode="before")
    @classmethod
    def text_or_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            return None
        return value

    @field_validator("in_stock", mode="before")
    @classmethod
    def parse_in_stock(cls, value: Any) -> Optional[bool]:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == "true":
                return True
            if lowered == "false":
                return False
        return None

    @field_validator("limit", mode="before")
    @classmethod
    def parse_limit(cls, value: Any) -> int:
        number = _to_int(value)
        if number is None or number < 1:
            return DEFAULT_LIMIT
        return number

    @field_validator("offset", mode="before")
    @classmethod
    def parse_offset(cls, value: Any) -> int:
        number = _to_int(value)
        if number is None or number < 0:
            return DEFAULT_OFFSET
        return number

def _to_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None
