"""PrescriptionProfile aggregate: a durable, user-owned saved prescription.

Profiles are never hard-deleted. Deactivation hides a profile from new cart
attachments; cart lines that already reference it read as "no prescription"
until the customer picks another one.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from eyecart.domain import eyecart
from eyecart.prescription.events import PrescriptionProfileCreated, PrescriptionProfileDeactivated

SPH_RANGE = (-20.0, 20.0)
CYL_RANGE = (-6.0, 6.0)
AXIS_RANGE = (0, 180)


@eyecart.aggregate
class PrescriptionProfile:
    user_id = Identifier(required=True)
    profile_name = String(required=True, max_length=100)
    right_sph = Float(min_value=SPH_RANGE[0], max_value=SPH_RANGE[1])
    right_cyl = Float(min_value=CYL_RANGE[0], max_value=CYL_RANGE[1])
    right_axis = Integer(min_value=AXIS_RANGE[0], max_value=AXIS_RANGE[1])
    left_sph = Float(min_value=SPH_RANGE[0], max_value=SPH_RANGE[1])
    left_cyl = Float(min_value=CYL_RANGE[0], max_value=CYL_RANGE[1])
    left_axis = Integer(min_value=AXIS_RANGE[0], max_value=AXIS_RANGE[1])
    # Set from a saved inline payload; None means derive it from the eye values
    requires_prescription = Boolean()
    is_active = Boolean(default=True)
    created_at = DateTime()
    deactivated_at = DateTime()

    @classmethod
    def create(
        cls,
        user_id,
        profile_name,
        right_sph=None,
        right_cyl=None,
        right_axis=None,
        left_sph=None,
        left_cyl=None,
        left_axis=None,
        requires_prescription=None,
    ):
        name = (profile_name or "").strip()
        if not name:
            raise ValidationError({"profile_name": ["Profile name is required"]})

        now = datetime.now(UTC)
        profile = cls(
            user_id=user_id,
            profile_name=name,
            right_sph=right_sph,
            right_cyl=right_cyl,
            right_axis=right_axis,
            left_sph=left_sph,
            left_cyl=left_cyl,
            left_axis=left_axis,
            requires_prescription=requires_prescription,
            is_active=True,
            created_at=now,
        )
        profile.raise_(
            PrescriptionProfileCreated(
                profile_id=str(profile.id),
                user_id=str(user_id),
                profile_name=name,
                created_at=now,
            )
        )
        return profile

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Prescription profile is already inactive"]})

        now = datetime.now(UTC)
        self.is_active = False
        self.deactivated_at = now

        self.raise_(
            PrescriptionProfileDeactivated(
                profile_id=str(self.id),
                user_id=str(self.user_id),
                deactivated_at=now,
            )
        )

    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    def eye(self, side):
        """Per-eye values as a plain dict, or None when the eye was left blank."""
        values = {
            "sph": getattr(self, f"{side}_sph"),
            "cyl": getattr(self, f"{side}_cyl"),
            "axis": getattr(self, f"{side}_axis"),
        }
        if all(v is None for v in values.values()):
            return None
        return values
