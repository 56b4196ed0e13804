"""Catalog port: the only view the cart engine has of the product catalog.

The catalog read path (listing, filtering, images) lives elsewhere; the cart
only needs a product's current price, currency, type and availability.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class ProductType(Enum):
    FRAME = "Frame"
    LENS = "Lens"
    SERVICE = "Service"


@dataclass(frozen=True)
class ProductSnapshot:
    """A product as the catalog sees it right now."""

    product_id: str
    product_type: str
    unit_price: Decimal
    currency: str
    is_active: bool = True
    is_prescription: bool = False
    prescription_fee: Decimal | None = None


class CatalogGateway(ABC):
    """Abstract catalog lookup."""

    @abstractmethod
    def get_product(self, product_id: str) -> ProductSnapshot | None:
        """Return the product, or None when the catalog does not know it."""
        ...
