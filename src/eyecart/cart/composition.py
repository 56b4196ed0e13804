"""Composes a line's prescription attachment and the fee it snapshots.

Shared by add-to-cart and the prescription update commands so both price a
prescription the same way.
"""

from decimal import Decimal

from eyecart.cart.cart import PrescriptionAttachment
from eyecart.catalog.port import ProductSnapshot, ProductType
from eyecart.prescription.resolver import PrescriptionResolver
from eyecart.shared.errors import MalformedPrescriptionPayload, PrescriptionNotApplicable
from eyecart.shared.money import ZERO


def ensure_prescription_applicable(product: ProductSnapshot) -> None:
    if product.product_type == ProductType.SERVICE.value:
        raise PrescriptionNotApplicable(
            "Services cannot carry a prescription",
            product_type=product.product_type,
            product_id=product.product_id,
        )


def compose_inline(product: ProductSnapshot, payload, resolver: PrescriptionResolver | None = None):
    resolver = resolver or PrescriptionResolver()
    ensure_prescription_applicable(product)
    descriptor = resolver.resolve_inline(payload)
    return PrescriptionAttachment.inline(descriptor.payload), resolver.fee_for(descriptor, product)


def compose_by_profile(product: ProductSnapshot, user_id, profile_id, resolver: PrescriptionResolver | None = None):
    resolver = resolver or PrescriptionResolver()
    ensure_prescription_applicable(product)
    descriptor = resolver.resolve_by_profile(user_id, profile_id)
    return PrescriptionAttachment.by_profile(descriptor.profile_id), resolver.fee_for(descriptor, product)


def compose(
    product: ProductSnapshot, user_id, inline_payload=None, profile_id=None
) -> tuple[PrescriptionAttachment, Decimal]:
    """Attachment and per-unit fee for an add-to-cart request."""
    if inline_payload is not None and profile_id:
        raise MalformedPrescriptionPayload("Give either an inline prescription or a profile, not both")
    if inline_payload is not None:
        return compose_inline(product, inline_payload)
    if profile_id:
        return compose_by_profile(product, user_id, profile_id)
    return PrescriptionAttachment.none(), ZERO
