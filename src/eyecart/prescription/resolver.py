"""Prescription reference resolution.

Turns either a saved profile id or an inline payload into one canonical
``PrescriptionDescriptor``, and prices the prescription work for a given
product.
"""

from dataclasses import dataclass, field
from decimal import Decimal

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from eyecart.catalog.port import ProductSnapshot, ProductType
from eyecart.prescription.payload import (
    LENS_REFERENCE_KEY,
    REQUIRES_PRESCRIPTION_KEY,
    extract_referenced_lens_product,
    normalize_inline_payload,
)
from eyecart.prescription.profile import PrescriptionProfile
from eyecart.settings import prescription_fee_default
from eyecart.shared.errors import ProfileNotFound, Unauthorized
from eyecart.shared.money import ZERO

logger = structlog.get_logger(__name__)


class PrescriptionSource:
    INLINE = "Inline"
    PROFILE = "ByProfile"


@dataclass(frozen=True)
class PrescriptionDescriptor:
    source: str
    right: dict | None = None
    left: dict | None = None
    profile_id: str | None = None
    payload: dict = field(default_factory=dict)
    lens_product_id: str | None = None
    requires_prescription: bool = True


def _has_correction(eye: dict | None) -> bool:
    if not eye:
        return False
    return any(eye.get(key) not in (None, "") and Decimal(str(eye[key])) != 0 for key in ("sph", "cyl"))


class PrescriptionResolver:
    def resolve_by_profile(self, user_id, profile_id) -> PrescriptionDescriptor:
        """Resolve an active profile owned by ``user_id``.

        Raises ProfileNotFound for unknown or deactivated profiles and
        Unauthorized for a profile owned by somebody else.
        """
        profile = self.load_profile(profile_id)
        if profile is None:
            raise ProfileNotFound(f"Prescription profile {profile_id} not found", profile_id=str(profile_id))
        # Foreign profiles are Unauthorized whatever their status
        if not profile.is_owned_by(user_id):
            logger.warning("Cross-user prescription access refused", user_id=str(user_id), profile_id=str(profile_id))
            raise Unauthorized("Prescription profile does not belong to this customer")
        if not profile.is_active:
            raise ProfileNotFound(f"Prescription profile {profile_id} not found", profile_id=str(profile_id))
        return self.describe_profile(profile)

    def describe_profile(self, profile: PrescriptionProfile) -> PrescriptionDescriptor:
        right, left = profile.eye("right"), profile.eye("left")
        requires = profile.requires_prescription
        if requires is None:
            requires = _has_correction(right) or _has_correction(left)

        return PrescriptionDescriptor(
            source=PrescriptionSource.PROFILE,
            right=right,
            left=left,
            profile_id=str(profile.id),
            requires_prescription=requires,
        )

    def resolve_inline(self, payload) -> PrescriptionDescriptor:
        canonical = normalize_inline_payload(payload)
        right, left = canonical.get("right"), canonical.get("left")

        requires = canonical.get(REQUIRES_PRESCRIPTION_KEY)
        if requires is None:
            requires = _has_correction(right) or _has_correction(left)

        return PrescriptionDescriptor(
            source=PrescriptionSource.INLINE,
            right=right,
            left=left,
            payload=canonical,
            lens_product_id=canonical.get(LENS_REFERENCE_KEY),
            requires_prescription=requires,
        )

    def extract_referenced_lens_product(self, payload) -> str | None:
        return extract_referenced_lens_product(payload)

    def fee_for(self, descriptor: PrescriptionDescriptor | None, product: ProductSnapshot) -> Decimal:
        """Per-unit prescription surcharge for ``product``.

        Only prescription lenses are surcharged, and only when the descriptor
        calls for prescription work. A lens's own fee wins over the
        configured default.
        """
        if descriptor is None or not descriptor.requires_prescription:
            return ZERO
        if product.product_type != ProductType.LENS.value or not product.is_prescription:
            return ZERO
        if product.prescription_fee is not None:
            return product.prescription_fee
        return prescription_fee_default()

    def active_profile(self, profile_id) -> PrescriptionProfile | None:
        """Profile lookup used on reads: None when missing or deactivated."""
        profile = self.load_profile(profile_id)
        if profile is None or not profile.is_active:
            return None
        return profile

    @staticmethod
    def load_profile(profile_id) -> PrescriptionProfile | None:
        if not profile_id:
            return None
        try:
            return current_domain.repository_for(PrescriptionProfile).get(str(profile_id))
        except ObjectNotFoundError:
            return None
