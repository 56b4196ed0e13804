"""In-memory catalog for development and testing.

Products are registered by the caller (seed scripts, tests). Lookups are
plain dictionary reads, so every call sees the latest registered state.
"""

import json
from dataclasses import replace

from eyecart.catalog.port import CatalogGateway, ProductSnapshot, ProductType
from eyecart.settings import default_currency
from eyecart.shared.money import to_decimal


class InMemoryCatalog(CatalogGateway):
    def __init__(self) -> None:
        self._products: dict[str, ProductSnapshot] = {}

    def add_product(
        self,
        product_id,
        product_type: ProductType | str,
        unit_price,
        currency: str | None = None,
        is_active: bool = True,
        is_prescription: bool = False,
        prescription_fee=None,
    ) -> ProductSnapshot:
        snapshot = ProductSnapshot(
            product_id=str(product_id),
            product_type=ProductType(product_type).value,
            unit_price=to_decimal(unit_price),
            currency=currency or default_currency(),
            is_active=is_active,
            is_prescription=is_prescription,
            prescription_fee=to_decimal(prescription_fee) if prescription_fee is not None else None,
        )
        self._products[snapshot.product_id] = snapshot
        return snapshot

    def set_active(self, product_id, is_active: bool) -> None:
        key = str(product_id)
        self._products[key] = replace(self._products[key], is_active=is_active)

    def set_price(self, product_id, unit_price) -> None:
        key = str(product_id)
        self._products[key] = replace(self._products[key], unit_price=to_decimal(unit_price))

    def load(self, products) -> int:
        """Register each product mapping (keys as for ``add_product``). Returns the count."""
        count = 0
        for product in products:
            self.add_product(**product)
            count += 1
        return count

    def load_json(self, path) -> int:
        with open(path, encoding="utf-8") as fh:
            return self.load(json.load(fh))

    def clear(self) -> None:
        self._products.clear()

    def get_product(self, product_id: str) -> ProductSnapshot | None:
        return self._products.get(str(product_id))
