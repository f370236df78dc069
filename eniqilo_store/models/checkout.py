# eniqilo_store/models/checkout.py
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field

class CheckoutState(str, Enum):
    PENDING = "pending"
    VALIDATING = "validating"
    REJECTED = "rejected"
    MUTATING = "mutating"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"

class CheckoutErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    OUT_OF_STOCK = "out_of_stock"

class CheckoutLine(BaseModel):
    """A single (product, quantity) request"""
    product_id: str = Field(min_length=1, alias="productId")
    quantity: int = Field(gt=0)

    model_config = ConfigDict(populate_by_name=True)

class StockShortfall(BaseModel):
    product_id: str
    requested: int
    available: int

    @computed_field
    @property
    def shortfall(self) -> int:
        return self.requested - self.available

class CheckoutError(BaseModel):
    """Why a checkout was rejected"""
    kind: CheckoutErrorKind
    product_ids: List[str]
    shortfalls: List[StockShortfall] = []

class CheckoutResult(BaseModel):
    """Outcome of one checkout, committed or rolled back as a whole"""
    state: CheckoutState
    error: Optional[CheckoutError] = None
    # Stock left per product after a committed checkout
    remaining_stock: Dict[str, int] = {}

    @property
    def is_committed(self) -> bool:
        return self.state == CheckoutState.COMMITTED
