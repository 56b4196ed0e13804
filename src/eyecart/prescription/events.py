"""Domain events for the PrescriptionProfile aggregate."""

from protean.fields import DateTime, Identifier, String

from eyecart.domain import eyecart


@eyecart.event(part_of="PrescriptionProfile")
class PrescriptionProfileCreated:
    """A customer saved a reusable prescription profile."""

    profile_id = Identifier(required=True)
    user_id = Identifier(required=True)
    profile_name = String(required=True)
    created_at = DateTime(required=True)


@eyecart.event(part_of="PrescriptionProfile")
class PrescriptionProfileDeactivated:
    """A prescription profile was soft-deactivated and can no longer be attached."""

    profile_id = Identifier(required=True)
    user_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)
