"""Repository for the Cart aggregate."""

from eyecart.cart.cart import Cart
from eyecart.domain import eyecart


@eyecart.repository(part_of=Cart)
class CartRepository:
    """Carts are addressed by their owner; there is at most one per user."""

    def get_for_user(self, user_id) -> Cart | None:
        found = self._dao.query.filter(user_id=str(user_id)).all().items
        if not found:
            return None
        return self.get(found[0].id)

    def get_or_create_for_user(self, user_id) -> Cart:
        return self.get_for_user(user_id) or Cart.create(user_id=user_id)
