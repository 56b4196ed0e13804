"""Cart totals.

Computes the breakdown a customer sees: per-line totals, the base subtotal,
the prescription surcharges and the grand total, plus whether the cart can be
checked out right now. Unit prices and fees come from the line snapshots;
only availability and profile status are looked up live.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from protean.utils.globals import current_domain

from eyecart.cart.cart import AttachmentKind, Cart, CartLine
from eyecart.cart.locking import get_cart_lock
from eyecart.catalog.resolver import PriceResolver
from eyecart.prescription.resolver import PrescriptionResolver
from eyecart.settings import default_currency
from eyecart.shared.errors import ProductNotFound
from eyecart.shared.money import ZERO


@dataclass(frozen=True)
class LineView:
    line_id: str
    product_type: str
    product_id: str
    quantity: int
    unit_price: Decimal
    prescription_fee: Decimal
    line_total: Decimal
    attachment_kind: str
    effective_attachment_kind: str
    profile_id: str | None = None
    prescription: dict | None = None
    referenced_lens_product_id: str | None = None
    is_purchasable: bool = True


@dataclass(frozen=True)
class CartBreakdown:
    user_id: str
    currency: str
    lines: list[LineView] = field(default_factory=list)
    subtotal_base: Decimal = ZERO
    prescription_fees_total: Decimal = ZERO
    grand_total: Decimal = ZERO
    is_purchasable: bool = False


class TotalsCalculator:
    def __init__(self, price_resolver: PriceResolver | None = None, prescriptions: PrescriptionResolver | None = None):
        self.price_resolver = price_resolver or PriceResolver()
        self.prescriptions = prescriptions or PrescriptionResolver()

    def breakdown(self, user_id, cart: Cart | None) -> CartBreakdown:
        if cart is None or not cart.lines:
            return CartBreakdown(user_id=str(user_id), currency=(cart and cart.currency()) or default_currency())

        views = [self.line_view(line) for line in sorted(cart.lines, key=_display_order)]
        subtotal = sum((v.unit_price * v.quantity for v in views), ZERO)
        fees = sum((v.prescription_fee * v.quantity for v in views), ZERO)

        return CartBreakdown(
            user_id=str(user_id),
            currency=cart.currency(),
            lines=views,
            subtotal_base=subtotal,
            prescription_fees_total=fees,
            grand_total=subtotal + fees,
            is_purchasable=all(v.is_purchasable for v in views),
        )

    def line_view(self, line: CartLine) -> LineView:
        attachment = line.current_attachment()
        kind = AttachmentKind(attachment.kind)
        fee = line.current_fee().to_decimal()
        effective_kind = kind

        # A line pointing at a profile that is gone or deactivated reads as no prescription
        if kind == AttachmentKind.BY_PROFILE and self.prescriptions.active_profile(attachment.profile_id) is None:
            effective_kind = AttachmentKind.NONE
            fee = ZERO
        if kind == AttachmentKind.NONE:
            fee = ZERO

        unit_price = line.unit_price.to_decimal()
        payload = attachment.payload if kind == AttachmentKind.INLINE else None

        return LineView(
            line_id=str(line.id),
            product_type=line.product_type,
            product_id=str(line.product_id),
            quantity=line.quantity,
            unit_price=unit_price,
            prescription_fee=fee,
            line_total=(unit_price + fee) * line.quantity,
            attachment_kind=kind.value,
            effective_attachment_kind=effective_kind.value,
            profile_id=str(attachment.profile_id) if attachment.profile_id else None,
            prescription=attachment.payload_dict() if payload else None,
            referenced_lens_product_id=self.prescriptions.extract_referenced_lens_product(payload),
            is_purchasable=self.is_purchasable(line),
        )

    def is_purchasable(self, line: CartLine) -> bool:
        try:
            return self.price_resolver.resolve(line.product_type, line.product_id).is_active
        except ProductNotFound:
            return False


def _display_order(line: CartLine):
    return (line.added_at is None, line.added_at)


def compute_breakdown(user_id) -> CartBreakdown:
    """Breakdown of the user's cart, read under the user's cart lock."""
    with get_cart_lock().hold(user_id):
        cart = current_domain.repository_for(Cart).get_for_user(user_id)
        return TotalsCalculator().breakdown(user_id, cart)
