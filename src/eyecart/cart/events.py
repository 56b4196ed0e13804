"""Domain events for the Cart aggregate."""

from protean.fields import Boolean, Identifier, Integer, String

from eyecart.domain import eyecart


@eyecart.event(part_of="Cart")
class CartLineAdded:
    """Units of a product were added to the cart, as a new line or merged into one."""

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    line_id = Identifier(required=True)
    product_type = String(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    unit_price = String(required=True)
    attachment_kind = String(required=True)
    merged = Boolean(default=False)


@eyecart.event(part_of="Cart")
class CartLineQuantityUpdated:
    """A cart line's quantity was set to a new value."""

    cart_id = Identifier(required=True)
    line_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@eyecart.event(part_of="Cart")
class CartLineRemoved:
    """A line was deleted from the cart."""

    cart_id = Identifier(required=True)
    line_id = Identifier(required=True)


@eyecart.event(part_of="Cart")
class CartCleared:
    """Every line was removed from the cart."""

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    removed_line_count = Integer(required=True)


@eyecart.event(part_of="Cart")
class CartLinePrescriptionChanged:
    """A line's prescription attachment and fee were replaced together."""

    cart_id = Identifier(required=True)
    line_id = Identifier(required=True)
    previous_kind = String(required=True)
    new_kind = String(required=True)
    profile_id = Identifier()
    prescription_fee = String(required=True)
