# eniqilo_store/models/product.py
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from .base import TimeStampedModel

class ProductCategory(str, Enum):
    CLOTHING = "Clothing"
    ACCESSORIES = "Accessories"
    FOOTWARE = "Footware"
    BEVERAGES = "Beverages"

PRODUCT_CATEGORIES = frozenset(category.value for category in ProductCategory)

class Product(TimeStampedModel):
    """Product row as stored"""
    id: str
    name: str
    sku: str
    category: ProductCategory
    image_urls: List[str] = []
    notes: str = ""
    price: int = Field(ge=0)
    stock: int = Field(ge=0)
    location: str = ""
    is_available: bool = True

class ProductIn(BaseModel):
    """Writable product fields"""
    name: str = Field(min_length=1)
    sku: str = Field(min_length=1)
    category: ProductCategory
    image_urls: List[str] = Field(default_factory=list, alias="imageUrls")
    notes: str = ""
    price: int = Field(ge=0)
    stock: int = Field(ge=0)
    location: str = ""
    is_available: bool = Field(default=True, alias="isAvailable")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("image_urls")
    @classmethod
    def strip_empty_urls(cls, urls: List[str]) -> List[str]:
        return [url for url in urls if url.strip()]

    def new_product(self) -> Product:
        return Product(
            id=uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc).replace(microsecond=0),
            **self.model_dump()
        )
