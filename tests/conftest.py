"""Shared fixtures."""

import pytest

from fakes import FakeDatabase, InMemoryProductRepository, make_product


@pytest.fixture
def repository():
    return InMemoryProductRepository()


@pytest.fixture
def stocked_db():
    """P1 with 10 units, P2 with 5 units, both available."""
    return FakeDatabase([make_product("P1", stock=10), make_product("P2", stock=5)])
