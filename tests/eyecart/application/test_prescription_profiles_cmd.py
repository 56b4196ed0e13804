"""Application tests for prescription profile commands."""

import pytest
from eyecart.prescription.management import CreatePrescriptionProfile, DeactivatePrescriptionProfile
from eyecart.prescription.profile import PrescriptionProfile
from eyecart.shared.errors import ProfileNotFound, Unauthorized
from protean import current_domain
from protean.exceptions import ValidationError


def _create_profile(**overrides):
    defaults = {"user_id": "user-1", "profile_name": "Daily", "right_sph": -2.0, "left_sph": -1.75}
    defaults.update(overrides)
    return current_domain.process(CreatePrescriptionProfile(**defaults), asynchronous=False)


class TestCreatePrescriptionProfile:
    def test_create_persists(self):
        profile_id = _create_profile()
        profile = current_domain.repository_for(PrescriptionProfile).get(profile_id)
        assert profile.user_id == "user-1"
        assert profile.is_active is True
        assert profile.eye("right") == {"sph": -2.0, "cyl": None, "axis": None}

    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            _create_profile(right_cyl=-8.0)


class TestDeactivatePrescriptionProfile:
    def test_deactivate(self):
        profile_id = _create_profile()
        current_domain.process(DeactivatePrescriptionProfile(user_id="user-1", profile_id=profile_id), asynchronous=False)
        profile = current_domain.repository_for(PrescriptionProfile).get(profile_id)
        assert profile.is_active is False

    def test_other_users_profile_is_unauthorized(self):
        profile_id = _create_profile()
        with pytest.raises(Unauthorized):
            current_domain.process(
                DeactivatePrescriptionProfile(user_id="user-2", profile_id=profile_id), asynchronous=False
            )
        assert current_domain.repository_for(PrescriptionProfile).get(profile_id).is_active is True

    def test_unknown_profile(self):
        with pytest.raises(ProfileNotFound):
            current_domain.process(
                DeactivatePrescriptionProfile(user_id="user-1", profile_id="missing"), asynchronous=False
            )
