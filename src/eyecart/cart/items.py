"""Cart line management: commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from eyecart.cart import composition
from eyecart.cart.cart import Cart, require_positive_quantity
from eyecart.catalog.port import ProductType
from eyecart.catalog.resolver import PriceResolver
from eyecart.domain import eyecart
from eyecart.shared.errors import LineNotFound
from eyecart.utils.logging import get_logger

logger = get_logger(__name__)


@eyecart.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_type = String(required=True, choices=ProductType)
    product_id = Identifier(required=True)
    # Range checked by the aggregate so callers get InvalidQuantity
    quantity = Integer(required=True)
    inline_prescription = Text()
    prescription_profile_id = Identifier()


@eyecart.command(part_of="Cart")
class UpdateCartQuantity:
    user_id = Identifier(required=True)
    line_id = Identifier(required=True)
    new_quantity = Integer(required=True)


@eyecart.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    line_id = Identifier(required=True)


def load_cart(user_id, line_id=None) -> Cart:
    """The user's cart, for commands that address an existing line."""
    cart = current_domain.repository_for(Cart).get_for_user(user_id)
    if cart is None:
        raise LineNotFound(f"Cart line {line_id} not found", line_id=str(line_id))
    return cart


@eyecart.command_handler(part_of=Cart)
class ManageCartLinesHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        require_positive_quantity(command.quantity)
        product = PriceResolver().resolve_purchasable(command.product_type, command.product_id)
        attachment, fee = composition.compose(
            product,
            command.user_id,
            inline_payload=command.inline_prescription,
            profile_id=command.prescription_profile_id,
        )

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create_for_user(command.user_id)
        line = cart.add_line(product, command.quantity, attachment=attachment, prescription_fee=fee)
        repo.add(cart)

        logger.info(
            "Added to cart",
            user_id=str(command.user_id),
            line_id=str(line.id),
            product_type=product.product_type,
            product_id=product.product_id,
            quantity=command.quantity,
        )
        return str(line.id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        require_positive_quantity(command.new_quantity)
        repo = current_domain.repository_for(Cart)
        cart = load_cart(command.user_id, command.line_id)
        cart.update_line_quantity(command.line_id, command.new_quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = load_cart(command.user_id, command.line_id)
        cart.remove_line(command.line_id)
        repo.add(cart)
