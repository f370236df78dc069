# eniqilo_store/services/inventory_service.py
import asyncio
import logging
from typing import Dict, List, Optional, Sequence
from ..config import Config
from ..database.product_repository import ProductRepository
from ..errors import StorageError
from ..models.checkout import (
    CheckoutError,
    CheckoutErrorKind,
    CheckoutLine,
    CheckoutResult,
    CheckoutState,
    StockShortfall
)
from ..models.product import Product

class _CheckoutRejected(Exception):
    """Raised inside the unit of work to force a rollback"""

    def __init__(self, error: CheckoutError):
        super().__init__(error.kind.value)
        self.error = error

def aggregate_lines(lines: Sequence[CheckoutLine]) -> Dict[str, int]:
    """Total requested quantity per product id, in first-seen order"""
    requested: Dict[str, int] = {}
    for line in lines:
        requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity
    return requested

def validate_checkout(requested: Dict[str, int],
                      products: Dict[str, Product]) -> Optional[CheckoutError]:
    """First failing check across the whole checkout, or None.

    Checks run existence, then availability, then sufficiency, each over
    every product before moving on.
    """
    missing = [pid for pid in requested if pid not in products]
    if missing:
        return CheckoutError(kind=CheckoutErrorKind.NOT_FOUND, product_ids=missing)

    unavailable = [pid for pid in requested if not products[pid].is_available]
    if unavailable:
        return CheckoutError(kind=CheckoutErrorKind.UNAVAILABLE, product_ids=unavailable)

    shortfalls = [
        StockShortfall(product_id=pid, requested=quantity, available=products[pid].stock)
        for pid, quantity in requested.items()
        if quantity > products[pid].stock
    ]
    if shortfalls:
        return CheckoutError(
            kind=CheckoutErrorKind.OUT_OF_STOCK,
            product_ids=[s.product_id for s in shortfalls],
            shortfalls=shortfalls
        )

    return None

class InventoryService:
    """Validate-then-decrement checkout over a single transaction"""

    def __init__(self, db, repository: Optional[ProductRepository] = None,
                 timeout: Optional[float] = None):
        self.db = db
        self.repository = repository or ProductRepository()
        self.timeout = Config.CHECKOUT_TIMEOUT if timeout is None else timeout
        self.logger = logging.getLogger(__name__)

    async def checkout(self, lines: List[CheckoutLine]) -> CheckoutResult:
        """Decrement stock for every line or for none of them.

        Rejections come back as a rolled back CheckoutResult. StorageError,
        asyncio.TimeoutError and cancellation are raised after rollback.
        """
        if not lines:
            return CheckoutResult(state=CheckoutState.COMMITTED)

        if self.timeout and self.timeout > 0:
            return await asyncio.wait_for(self._checkout(lines), timeout=self.timeout)
        return await self._checkout(lines)

    async def _checkout(self, lines: List[CheckoutLine]) -> CheckoutResult:
        requested = aggregate_lines(lines)
        # Rows are locked and updated in id order so concurrent checkouts
        # over overlapping products cannot deadlock.
        product_ids = sorted(requested)
        state = CheckoutState.PENDING

        try:
            async with self.db.transaction() as conn:
                state = self._enter(state, CheckoutState.VALIDATING)
                rows = await self.repository.read_products_by_ids(conn, product_ids, for_update=True)
                products = {product.id: product for product in rows}

                error = validate_checkout(requested, products)
                if error is not None:
                    state = self._enter(state, CheckoutState.REJECTED)
                    raise _CheckoutRejected(error)

                state = self._enter(state, CheckoutState.MUTATING)
                remaining = {}
                for product_id in product_ids:
                    quantity = requested[product_id]
                    affected = await self.repository.decrement_stock(conn, product_id, quantity)
                    if affected != 1:
                        raise StorageError(
                            f"stock decrement for product {product_id} affected {affected} rows"
                        )
                    remaining[product_id] = products[product_id].stock - quantity

        except _CheckoutRejected as rejected:
            self._enter(state, CheckoutState.ROLLED_BACK)
            self.logger.info(
                f"Checkout rejected ({rejected.error.kind.value}): {rejected.error.product_ids}"
            )
            return CheckoutResult(state=CheckoutState.ROLLED_BACK, error=rejected.error)
        except StorageError as e:
            self._enter(state, CheckoutState.ROLLED_BACK)
            self.logger.error(f"Checkout rolled back on storage error: {e}")
            raise
        except BaseException:
            self._enter(state, CheckoutState.ROLLED_BACK)
            raise

        self._enter(state, CheckoutState.COMMITTED)
        return CheckoutResult(state=CheckoutState.COMMITTED, remaining_stock=remaining)

    def _enter(self, current: CheckoutState, new: CheckoutState) -> CheckoutState:
        self.logger.debug(f"Checkout {current.value} -> {new.value}")
        return new
