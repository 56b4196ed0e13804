"""Catalog adapter factory.

Provides get_catalog() / set_catalog() to swap implementations. The adapter
is chosen by the CATALOG_ADAPTER environment variable; only the in-memory
catalog ships with the engine, real deployments plug their own in with
set_catalog().
"""

from eyecart.catalog.port import CatalogGateway
from eyecart.settings import catalog_adapter, catalog_seed_file

_current_catalog: CatalogGateway | None = None


def get_catalog() -> CatalogGateway:
    """Return the active catalog gateway (singleton)."""
    global _current_catalog
    if _current_catalog is None:
        adapter = catalog_adapter()
        if adapter == "memory":
            from eyecart.catalog.memory_adapter import InMemoryCatalog

            _current_catalog = InMemoryCatalog()
            seed = catalog_seed_file()
            if seed:
                _current_catalog.load_json(seed)
        else:
            raise ValueError(f"Unknown catalog adapter: {adapter}")
    return _current_catalog


def set_catalog(catalog: CatalogGateway) -> None:
    """Override the active catalog gateway."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    global _current_catalog
    _current_catalog = None
