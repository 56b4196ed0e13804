"""Price resolution against the catalog port."""

import structlog

from eyecart.catalog import get_catalog
from eyecart.catalog.port import CatalogGateway, ProductSnapshot, ProductType
from eyecart.shared.errors import ProductInactive, ProductNotFound

logger = structlog.get_logger(__name__)


class PriceResolver:
    """Looks up a product's current unit price, currency and availability.

    Single attempt, no caching, no side effects.
    """

    def __init__(self, catalog: CatalogGateway | None = None) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> CatalogGateway:
        return self._catalog or get_catalog()

    def resolve(self, product_type, product_id) -> ProductSnapshot:
        """Return the catalog snapshot for a typed product reference.

        A product whose catalog type differs from the requested type is
        reported as not found: the reference (type, id) does not exist.
        """
        requested_type = ProductType(product_type).value
        snapshot = self.catalog.get_product(str(product_id))

        if snapshot is None or snapshot.product_type != requested_type:
            raise ProductNotFound(
                f"{requested_type} {product_id} does not exist",
                product_type=requested_type,
                product_id=str(product_id),
            )
        return snapshot

    def resolve_purchasable(self, product_type, product_id) -> ProductSnapshot:
        snapshot = self.resolve(product_type, product_id)
        if not snapshot.is_active:
            logger.info("Rejected inactive product", product_id=snapshot.product_id)
            raise ProductInactive(
                f"{snapshot.product_type} {snapshot.product_id} is no longer available",
                product_type=snapshot.product_type,
                product_id=snapshot.product_id,
            )
        return snapshot
