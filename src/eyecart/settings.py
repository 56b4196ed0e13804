"""Engine settings read from the environment.

Values are read on every call so tests can monkeypatch the environment
without reloading modules.
"""

import os
from decimal import Decimal

DEFAULT_PRESCRIPTION_FEE = "500000"
DEFAULT_CURRENCY = "VND"


def prescription_fee_default() -> Decimal:
    """Per-unit surcharge for prescription work when a lens carries no fee of its own."""
    return Decimal(os.environ.get("PRESCRIPTION_FEE_DEFAULT", DEFAULT_PRESCRIPTION_FEE))


def default_currency() -> str:
    return os.environ.get("CART_CURRENCY", DEFAULT_CURRENCY)


def catalog_adapter() -> str:
    return os.environ.get("CATALOG_ADAPTER", "memory")


def lock_backend() -> str:
    return os.environ.get("CART_LOCK_BACKEND", "memory")


def lock_timeout_seconds() -> float:
    return float(os.environ.get("CART_LOCK_TIMEOUT_SECONDS", "5"))


def lock_ttl_seconds() -> int:
    return int(os.environ.get("CART_LOCK_TTL_SECONDS", "30"))


def redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def catalog_seed_file() -> str | None:
    """JSON file of products loaded into the in-memory catalog at startup."""
    return os.environ.get("CATALOG_SEED_FILE") or None
