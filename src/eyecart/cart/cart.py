"""Cart aggregate: one customer's in-progress order.

A Cart belongs to exactly one user and is created lazily on the first add.
Each CartLine snapshots its unit price when it is added, and carries a
PrescriptionAttachment plus the per-unit prescription fee captured for it.

Prescription attachment state machine (per line, caller driven):
    None <-> Inline <-> ByProfile
A line leaves the machine only when it is removed.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text, ValueObject

from eyecart.cart.events import (
    CartCleared,
    CartLineAdded,
    CartLinePrescriptionChanged,
    CartLineQuantityUpdated,
    CartLineRemoved,
)
from eyecart.catalog.port import ProductSnapshot, ProductType
from eyecart.domain import eyecart
from eyecart.prescription.payload import canonical_json
from eyecart.shared.errors import CurrencyMismatch, InvalidQuantity, LineNotFound
from eyecart.shared.money import Money


class AttachmentKind(Enum):
    NONE = "None"
    INLINE = "Inline"
    BY_PROFILE = "ByProfile"


@eyecart.value_object(part_of="Cart")
class PrescriptionAttachment:
    """Tagged union over the three ways a line can carry a prescription.

    Only the fields of the active variant may be populated: ``profile_id``
    for ByProfile, ``payload`` (canonical JSON) for Inline, neither for None.
    """

    kind = String(choices=AttachmentKind, default=AttachmentKind.NONE.value)
    profile_id = Identifier()
    payload = Text()

    @invariant.post
    def only_the_active_variant_is_populated(self):
        kind = self.kind
        if kind == AttachmentKind.NONE.value and (self.profile_id or self.payload):
            raise ValidationError({"attachment": ["A None attachment carries no profile or payload"]})
        if kind == AttachmentKind.BY_PROFILE.value and (not self.profile_id or self.payload):
            raise ValidationError({"attachment": ["A ByProfile attachment carries exactly a profile id"]})
        if kind == AttachmentKind.INLINE.value and (not self.payload or self.profile_id):
            raise ValidationError({"attachment": ["An Inline attachment carries exactly a payload"]})

    @classmethod
    def none(cls):
        return cls(kind=AttachmentKind.NONE.value)

    @classmethod
    def inline(cls, payload: dict):
        return cls(kind=AttachmentKind.INLINE.value, payload=canonical_json(payload))

    @classmethod
    def by_profile(cls, profile_id):
        return cls(kind=AttachmentKind.BY_PROFILE.value, profile_id=str(profile_id))

    def is_none(self) -> bool:
        return AttachmentKind(self.kind) == AttachmentKind.NONE

    def payload_dict(self) -> dict | None:
        return json.loads(self.payload) if self.payload else None

    def matches(self, other) -> bool:
        """Variant-and-payload equality, used to decide whether adds merge."""
        other = other or PrescriptionAttachment.none()
        return (
            self.kind == other.kind
            and (self.profile_id or None) == (other.profile_id or None)
            and (self.payload or None) == (other.payload or None)
        )


@eyecart.entity(part_of="Cart")
class CartLine:
    product_type = String(required=True, choices=ProductType)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = ValueObject(Money, required=True)
    prescription_fee = ValueObject(Money)
    attachment = ValueObject(PrescriptionAttachment)
    added_at = DateTime()

    def current_attachment(self) -> PrescriptionAttachment:
        return self.attachment or PrescriptionAttachment.none()

    def current_fee(self) -> Money:
        return self.prescription_fee or Money.zero(self.unit_price.currency)

    def refers_to(self, product_type, product_id) -> bool:
        return self.product_type == product_type and str(self.product_id) == str(product_id)


@eyecart.aggregate
class Cart:
    user_id = Identifier(required=True)
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def line_without_prescription_has_no_fee(self):
        for line in self.lines:
            if line.current_attachment().is_none() and not line.current_fee().is_zero():
                raise ValidationError({"lines": [f"Line {line.id} has a prescription fee but no prescription"]})

    @invariant.post
    def lines_share_one_currency(self):
        currencies = {line.unit_price.currency for line in self.lines}
        if len(currencies) > 1:
            raise ValidationError({"lines": ["All cart lines must be priced in the same currency"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def currency(self) -> str | None:
        return self.lines[0].unit_price.currency if self.lines else None

    def find_line(self, line_id) -> CartLine:
        line = next((ln for ln in self.lines if str(ln.id) == str(line_id)), None)
        if line is None:
            raise LineNotFound(f"Cart line {line_id} not found", line_id=str(line_id))
        return line

    def find_mergeable(self, product_type, product_id, attachment) -> CartLine | None:
        return next(
            (ln for ln in self.lines if ln.refers_to(product_type, product_id) and ln.current_attachment().matches(attachment)),
            None,
        )

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_line(self, product: ProductSnapshot, quantity, attachment=None, prescription_fee=None) -> CartLine:
        """Add ``quantity`` units of ``product``, merging into an equivalent line.

        The unit price and the fee are snapshotted from the arguments; the
        catalog is never consulted again for this line's price.
        """
        require_positive_quantity(quantity)
        attachment = attachment or PrescriptionAttachment.none()

        cart_currency = self.currency()
        if cart_currency and cart_currency != product.currency:
            raise CurrencyMismatch(
                f"Cart is priced in {cart_currency}, product {product.product_id} in {product.currency}",
                cart_currency=cart_currency,
                product_currency=product.currency,
            )

        now = datetime.now(UTC)
        existing = self.find_mergeable(product.product_type, product.product_id, attachment)
        merged = existing is not None

        if merged:
            existing.quantity += quantity
            line = existing
        else:
            line = CartLine(
                product_type=product.product_type,
                product_id=product.product_id,
                quantity=quantity,
                unit_price=Money.of(product.unit_price, product.currency),
                prescription_fee=Money.of(0 if attachment.is_none() else (prescription_fee or 0), product.currency),
                attachment=attachment,
                added_at=now,
            )
            self.add_lines(line)

        self.updated_at = now

        self.raise_(
            CartLineAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                line_id=str(line.id),
                product_type=product.product_type,
                product_id=product.product_id,
                quantity=quantity,
                unit_price=line.unit_price.amount,
                attachment_kind=line.current_attachment().kind,
                merged=merged,
            )
        )
        return line

    def update_line_quantity(self, line_id, new_quantity):
        """Set a line's quantity. Zero or negative is rejected, never a delete."""
        require_positive_quantity(new_quantity)
        line = self.find_line(line_id)

        previous_quantity = line.quantity
        line.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLineQuantityUpdated(
                cart_id=str(self.id),
                line_id=str(line.id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_line(self, line_id):
        line = self.find_line(line_id)
        self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartLineRemoved(cart_id=str(self.id), line_id=str(line_id)))

    def clear(self) -> int:
        """Remove every line. Clearing an empty cart is a no-op."""
        if not self.lines:
            return 0

        removed = list(self.lines)
        with atomic_change(self):
            for line in removed:
                self.remove_lines(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id), removed_line_count=len(removed)))
        return len(removed)

    # -------------------------------------------------------------------
    # Prescription attachment
    # -------------------------------------------------------------------
    def set_line_prescription(self, line_id, attachment, prescription_fee=None) -> CartLine:
        """Replace a line's attachment and fee as one change.

        Both fields are swapped inside a single atomic change, so the cart is
        never observed with the new attachment and the old fee (or the
        reverse).
        """
        line = self.find_line(line_id)
        attachment = attachment or PrescriptionAttachment.none()
        previous_kind = line.current_attachment().kind
        fee = Money.of(0 if attachment.is_none() else (prescription_fee or 0), line.unit_price.currency)

        with atomic_change(self):
            line.attachment = attachment
            line.prescription_fee = fee
            self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLinePrescriptionChanged(
                cart_id=str(self.id),
                line_id=str(line.id),
                previous_kind=previous_kind,
                new_kind=attachment.kind,
                profile_id=attachment.profile_id,
                prescription_fee=fee.amount,
            )
        )
        return line


def require_positive_quantity(quantity):
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity(f"Quantity must be a positive integer, got {quantity!r}", quantity=quantity)
