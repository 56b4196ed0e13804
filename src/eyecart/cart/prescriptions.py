"""Line prescription commands.

Each command swaps a line's attachment and its snapshotted fee together.
The fee is re-priced from the catalog's current lens data, while the line's
unit price stays as it was snapshotted at add time.
"""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from eyecart.cart import composition
from eyecart.cart.cart import AttachmentKind, Cart, PrescriptionAttachment
from eyecart.cart.items import load_cart
from eyecart.catalog.resolver import PriceResolver
from eyecart.domain import eyecart
from eyecart.prescription.payload import REQUIRES_PRESCRIPTION_KEY
from eyecart.prescription.profile import PrescriptionProfile
from eyecart.prescription.resolver import PrescriptionResolver
from eyecart.shared.errors import PrescriptionNotApplicable
from eyecart.utils.logging import get_logger

logger = get_logger(__name__)


@eyecart.command(part_of="Cart")
class SetLinePrescriptionInline:
    user_id = Identifier(required=True)
    line_id = Identifier(required=True)
    payload = Text(required=True)


@eyecart.command(part_of="Cart")
class SetLinePrescriptionByProfile:
    """Attach a saved profile to a line. Without a profile id the line is cleared to None."""

    user_id = Identifier(required=True)
    line_id = Identifier(required=True)
    profile_id = Identifier()


@eyecart.command(part_of="Cart")
class SaveLinePrescriptionAsProfile:
    user_id = Identifier(required=True)
    line_id = Identifier(required=True)
    profile_name = String(required=True, max_length=100)


def _profile_values(eye: dict | None, side: str) -> dict:
    eye = eye or {}
    return {
        f"{side}_sph": float(eye["sph"]) if eye.get("sph") is not None else None,
        f"{side}_cyl": float(eye["cyl"]) if eye.get("cyl") is not None else None,
        f"{side}_axis": eye.get("axis"),
    }


@eyecart.command_handler(part_of=Cart)
class ManageLinePrescriptionsHandler:
    @handle(SetLinePrescriptionInline)
    def set_inline(self, command):
        repo = current_domain.repository_for(Cart)
        cart = load_cart(command.user_id, command.line_id)
        line = cart.find_line(command.line_id)

        product = PriceResolver().resolve(line.product_type, line.product_id)
        attachment, fee = composition.compose_inline(product, command.payload)

        cart.set_line_prescription(line.id, attachment, prescription_fee=fee)
        repo.add(cart)
        logger.info("Line prescription set inline", user_id=str(command.user_id), line_id=str(line.id))

    @handle(SetLinePrescriptionByProfile)
    def set_by_profile(self, command):
        repo = current_domain.repository_for(Cart)
        cart = load_cart(command.user_id, command.line_id)
        line = cart.find_line(command.line_id)

        if not command.profile_id:
            cart.set_line_prescription(line.id, PrescriptionAttachment.none())
        else:
            product = PriceResolver().resolve(line.product_type, line.product_id)
            attachment, fee = composition.compose_by_profile(product, command.user_id, command.profile_id)
            cart.set_line_prescription(line.id, attachment, prescription_fee=fee)

        repo.add(cart)
        logger.info(
            "Line prescription set by profile",
            user_id=str(command.user_id),
            line_id=str(line.id),
            profile_id=str(command.profile_id) if command.profile_id else None,
        )

    @handle(SaveLinePrescriptionAsProfile)
    def save_as_profile(self, command):
        """Persist the line's inline payload as a profile and point the line at it.

        The payload's explicit requiresPrescription flag travels with the
        profile, so the line's fee is the same before and after the switch.
        """
        repo = current_domain.repository_for(Cart)
        cart = load_cart(command.user_id, command.line_id)
        line = cart.find_line(command.line_id)

        attachment = line.current_attachment()
        if AttachmentKind(attachment.kind) != AttachmentKind.INLINE:
            raise PrescriptionNotApplicable(
                "Only an inline prescription can be saved as a profile",
                line_id=str(line.id),
                attachment_kind=attachment.kind,
            )

        payload = attachment.payload_dict()
        profile = PrescriptionProfile.create(
            user_id=command.user_id,
            profile_name=command.profile_name,
            **_profile_values(payload.get("right"), "right"),
            **_profile_values(payload.get("left"), "left"),
            requires_prescription=payload.get(REQUIRES_PRESCRIPTION_KEY),
        )

        resolver = PrescriptionResolver()
        product = PriceResolver().resolve(line.product_type, line.product_id)
        fee = resolver.fee_for(resolver.describe_profile(profile), product)
        cart.set_line_prescription(line.id, PrescriptionAttachment.by_profile(profile.id), prescription_fee=fee)

        current_domain.repository_for(PrescriptionProfile).add(profile)
        repo.add(cart)
        logger.info(
            "Line prescription saved as profile",
            user_id=str(command.user_id),
            line_id=str(line.id),
            profile_id=str(profile.id),
        )
        return str(profile.id)
