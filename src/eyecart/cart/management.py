"""Whole-cart commands."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from eyecart.cart.cart import Cart
from eyecart.domain import eyecart
from eyecart.utils.logging import get_logger

logger = get_logger(__name__)


@eyecart.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


@eyecart.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_for_user(command.user_id)
        if cart is None:
            return 0

        removed = cart.clear()
        if removed:
            repo.add(cart)
        logger.info("Cart cleared", user_id=str(command.user_id), removed_line_count=removed)
        return removed
