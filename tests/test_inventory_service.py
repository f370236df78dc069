"""Tests for the checkout engine."""

import asyncio

import pytest

from eniqilo_store.errors import StorageError
from eniqilo_store.models import CheckoutErrorKind, CheckoutLine, CheckoutState
from eniqilo_store.services.inventory_service import (
    InventoryService,
    aggregate_lines,
    validate_checkout,
)
from fakes import FakeDatabase, InMemoryProductRepository, make_product


def lines(*pairs):
    return [CheckoutLine(product_id=pid, quantity=qty) for pid, qty in pairs]


@pytest.mark.asyncio
async def test_checkout_commits_and_decrements(stocked_db, repository):
    service = InventoryService(stocked_db, repository)

    result = await service.checkout(lines(("P1", 3), ("P2", 5)))

    assert result.state == CheckoutState.COMMITTED
    assert result.is_committed
    assert result.error is None
    assert result.remaining_stock == {"P1": 7, "P2": 0}
    assert stocked_db.stock("P1") == 7
    assert stocked_db.stock("P2") == 0
    assert stocked_db.transactions == 1
    assert stocked_db.commits == 1


@pytest.mark.asyncio
async def test_out_of_stock_leaves_every_product_untouched(repository):
    db = FakeDatabase([make_product("P1", stock=10), make_product("P2", stock=3)])
    service = InventoryService(db, repository)

    result = await service.checkout(lines(("P1", 5), ("P2", 5)))

    assert result.state == CheckoutState.ROLLED_BACK
    assert result.error.kind == CheckoutErrorKind.OUT_OF_STOCK
    assert result.error.product_ids == ["P2"]
    shortfall = result.error.shortfalls[0]
    assert (shortfall.requested, shortfall.available, shortfall.shortfall) == (5, 3, 2)
    assert db.stock("P1") == 10
    assert db.stock("P2") == 3
    assert repository.decrements == []
    assert db.rollbacks == 1


@pytest.mark.asyncio
async def test_missing_product_rejects_whole_checkout(stocked_db, repository):
    before = dict(stocked_db.rows)
    service = InventoryService(stocked_db, repository)

    result = await service.checkout(lines(("P1", 1), ("GHOST", 1), ("P2", 1), ("NOPE", 2)))

    assert result.state == CheckoutState.ROLLED_BACK
    assert result.error.kind == CheckoutErrorKind.NOT_FOUND
    assert result.error.product_ids == ["GHOST", "NOPE"]
    assert stocked_db.rows == before
    assert repository.decrements == []


@pytest.mark.asyncio
async def test_unavailable_product_rejects_checkout(repository):
    db = FakeDatabase([make_product("P1", stock=10), make_product("P2", stock=10, is_available=False)])
    service = InventoryService(db, repository)

    result = await service.checkout(lines(("P1", 1), ("P2", 1)))

    assert result.error.kind == CheckoutErrorKind.UNAVAILABLE
    assert result.error.product_ids == ["P2"]
    assert db.stock("P1") == 10


@pytest.mark.asyncio
async def test_not_found_takes_precedence_over_stock(repository):
    db = FakeDatabase([make_product("P1", stock=0)])
    service = InventoryService(db, repository)

    result = await service.checkout(lines(("P1", 4), ("P9", 1)))

    assert result.error.kind == CheckoutErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_duplicate_lines_are_aggregated_before_the_stock_check(repository):
    db = FakeDatabase([make_product("P1", stock=5)])
    service = InventoryService(db, repository)

    rejected = await service.checkout(lines(("P1", 3), ("P1", 3)))
    assert rejected.error.kind == CheckoutErrorKind.OUT_OF_STOCK
    assert rejected.error.shortfalls[0].requested == 6
    assert db.stock("P1") == 5

    committed = await service.checkout(lines(("P1", 2), ("P1", 3)))
    assert committed.is_committed
    assert db.stock("P1") == 0
    assert repository.decrements == [("P1", 5)]


@pytest.mark.asyncio
async def test_reads_lock_rows_in_id_order(repository):
    db = FakeDatabase([make_product("A", stock=5), make_product("B", stock=5)])
    service = InventoryService(db, repository)

    await service.checkout(lines(("B", 1), ("A", 1)))

    assert repository.reads == [(["A", "B"], True)]
    assert repository.decrements == [("A", 1), ("B", 1)]


@pytest.mark.asyncio
async def test_storage_error_during_mutation_rolls_back(stocked_db):
    repository = InMemoryProductRepository(fail_decrement_for={"P2"})
    service = InventoryService(stocked_db, repository)

    with pytest.raises(StorageError):
        await service.checkout(lines(("P1", 3), ("P2", 1)))

    # P1 was decremented before P2 failed; the rollback restores it
    assert repository.decrements == [("P1", 3), ("P2", 1)]
    assert stocked_db.stock("P1") == 10
    assert stocked_db.stock("P2") == 5
    assert stocked_db.rollbacks == 1


@pytest.mark.asyncio
async def test_zero_row_decrement_is_a_storage_error(stocked_db, repository):
    service = InventoryService(stocked_db, repository)

    async def lost_race(conn, product_id, quantity):
        return 0

    repository.decrement_stock = lost_race

    with pytest.raises(StorageError):
        await service.checkout(lines(("P1", 1)))
    assert stocked_db.rollbacks == 1


@pytest.mark.asyncio
async def test_deadline_expiry_rolls_back(stocked_db):
    repository = InMemoryProductRepository(read_delay=1)
    service = InventoryService(stocked_db, repository, timeout=0.05)

    with pytest.raises(asyncio.TimeoutError):
        await service.checkout(lines(("P1", 1)))

    assert stocked_db.rollbacks == 1
    assert stocked_db.commits == 0
    assert stocked_db.stock("P1") == 10


@pytest.mark.asyncio
async def test_empty_checkout_is_a_noop(stocked_db, repository):
    service = InventoryService(stocked_db, repository)

    result = await service.checkout([])

    assert result.is_committed
    assert stocked_db.transactions == 0


@pytest.mark.asyncio
async def test_concurrent_checkouts_never_oversell():
    # The read suspends while holding the row lock, so the second checkout
    # waits on the lock and then sees the committed stock.
    db = FakeDatabase([make_product("LAST", stock=1)])
    repository = InMemoryProductRepository(read_delay=0.01)
    service = InventoryService(db, repository)

    results = await asyncio.gather(
        service.checkout(lines(("LAST", 1))),
        service.checkout(lines(("LAST", 1))),
    )

    states = sorted(r.state.value for r in results)
    assert states == ["committed", "rolled_back"]
    assert db.stock("LAST") == 0
    rejected = next(r for r in results if not r.is_committed)
    assert rejected.error.kind == CheckoutErrorKind.OUT_OF_STOCK
    assert db.commits == 1
    assert db.rollbacks == 1


def test_aggregate_lines_keeps_first_seen_order():
    assert aggregate_lines(lines(("B", 1), ("A", 2), ("B", 4))) == {"B": 5, "A": 2}


def test_validate_checkout_passes_when_stock_suffices():
    products = {"P1": make_product("P1", stock=2)}
    assert validate_checkout({"P1": 2}, products) is None
