"""Prescription profile management: commands and handler."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from eyecart.domain import eyecart
from eyecart.prescription.profile import PrescriptionProfile
from eyecart.prescription.resolver import PrescriptionResolver
from eyecart.shared.errors import ProfileNotFound, Unauthorized
from eyecart.utils.logging import get_logger

logger = get_logger(__name__)


@eyecart.command(part_of="PrescriptionProfile")
class CreatePrescriptionProfile:
    user_id = Identifier(required=True)
    profile_name = String(required=True, max_length=100)
    right_sph = Float()
    right_cyl = Float()
    right_axis = Integer()
    left_sph = Float()
    left_cyl = Float()
    left_axis = Integer()


@eyecart.command(part_of="PrescriptionProfile")
class DeactivatePrescriptionProfile:
    user_id = Identifier(required=True)
    profile_id = Identifier(required=True)


@eyecart.command_handler(part_of=PrescriptionProfile)
class ManagePrescriptionProfilesHandler:
    @handle(CreatePrescriptionProfile)
    def create_profile(self, command):
        profile = PrescriptionProfile.create(
            user_id=command.user_id,
            profile_name=command.profile_name,
            right_sph=command.right_sph,
            right_cyl=command.right_cyl,
            right_axis=command.right_axis,
            left_sph=command.left_sph,
            left_cyl=command.left_cyl,
            left_axis=command.left_axis,
        )
        current_domain.repository_for(PrescriptionProfile).add(profile)
        logger.info("Prescription profile created", user_id=str(command.user_id), profile_id=str(profile.id))
        return str(profile.id)

    @handle(DeactivatePrescriptionProfile)
    def deactivate_profile(self, command):
        repo = current_domain.repository_for(PrescriptionProfile)
        profile = PrescriptionResolver.load_profile(command.profile_id)
        if profile is None:
            raise ProfileNotFound(
                f"Prescription profile {command.profile_id} not found", profile_id=str(command.profile_id)
            )
        if not profile.is_owned_by(command.user_id):
            raise Unauthorized("Prescription profile does not belong to this customer")

        profile.deactivate()
        repo.add(profile)
        logger.info("Prescription profile deactivated", user_id=str(command.user_id), profile_id=str(profile.id))
