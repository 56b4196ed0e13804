from decimal import Decimal

import pytest
from eyecart.cart.locking import InProcessCartLock, reset_cart_lock, set_cart_lock
from eyecart.catalog import reset_catalog, set_catalog
from eyecart.catalog.memory_adapter import InMemoryCatalog


@pytest.fixture(scope="session")
def _eyecart_domain(request):
    """Initialize the eyecart domain once per session."""
    from eyecart.domain import eyecart

    eyecart.init()
    return eyecart


@pytest.fixture(scope="session", autouse=True)
def setup_db(_eyecart_domain):
    from eyecart.utils.db import drop_db, setup_db

    setup_db(_eyecart_domain)

    yield

    drop_db(_eyecart_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_eyecart_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _eyecart_domain.domain_context()
    ctx.push()
    set_cart_lock(InProcessCartLock())

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    reset_catalog()
    reset_cart_lock()
    ctx.pop()


@pytest.fixture()
def catalog():
    """A fresh in-memory catalog seeded with the storefront's reference products."""
    catalog = InMemoryCatalog()
    catalog.add_product("10", "Frame", Decimal("500000"))
    catalog.add_product("11", "Frame", Decimal("750000"))
    catalog.add_product("20", "Lens", Decimal("800000"), is_prescription=True)
    catalog.add_product("21", "Lens", Decimal("300000"))
    catalog.add_product("22", "Lens", Decimal("1200000"), is_prescription=True, prescription_fee=Decimal("650000"))
    catalog.add_product("30", "Service", Decimal("100000"))
    set_catalog(catalog)
    return catalog
