"""Tests for price and prescription resolution."""

import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from eyecart.catalog import get_catalog, reset_catalog
from eyecart.catalog.memory_adapter import InMemoryCatalog
from eyecart.catalog.resolver import PriceResolver
from eyecart.prescription.profile import PrescriptionProfile
from eyecart.prescription.resolver import PrescriptionResolver, PrescriptionSource
from eyecart.shared.errors import (
    MalformedPrescriptionPayload,
    ProductInactive,
    ProductNotFound,
    ProfileNotFound,
    Unauthorized,
)
from protean import current_domain


class TestPriceResolver:
    def test_resolve(self, catalog):
        quote = PriceResolver().resolve("Lens", "20")
        assert quote.unit_price == Decimal("800000")
        assert quote.currency == "VND"
        assert quote.is_prescription is True

    def test_unknown_product(self, catalog):
        with pytest.raises(ProductNotFound) as exc_info:
            PriceResolver().resolve("Frame", "404")
        assert exc_info.value.to_dict()["code"] == "product_not_found"

    def test_type_mismatch_is_not_found(self, catalog):
        with pytest.raises(ProductNotFound):
            PriceResolver().resolve("Service", "10")

    def test_inactive_product_still_resolves(self, catalog):
        catalog.set_active("10", False)
        assert PriceResolver().resolve("Frame", "10").is_active is False

    def test_purchasable_rejects_inactive(self, catalog):
        catalog.set_active("10", False)
        with pytest.raises(ProductInactive):
            PriceResolver().resolve_purchasable("Frame", "10")

    def test_single_lookup_per_call(self, catalog):
        spy = MagicMock(wraps=catalog)
        PriceResolver(catalog=spy).resolve("Frame", "10")
        spy.get_product.assert_called_once_with("10")

    def test_explicit_catalog(self):
        own = InMemoryCatalog()
        own.add_product("1", "Frame", "10", currency="USD")
        assert PriceResolver(catalog=own).resolve("Frame", "1").currency == "USD"


class TestCatalogFactory:
    def test_default_adapter_is_memory(self, monkeypatch):
        monkeypatch.delenv("CATALOG_ADAPTER", raising=False)
        reset_catalog()
        assert isinstance(get_catalog(), InMemoryCatalog)

    def test_memory_catalog_seeded_from_file(self, monkeypatch, tmp_path):
        seed = tmp_path / "catalog.json"
        seed.write_text(
            json.dumps(
                [
                    {"product_id": "10", "product_type": "Frame", "unit_price": "500000"},
                    {"product_id": "20", "product_type": "Lens", "unit_price": "800000", "is_prescription": True},
                ]
            )
        )
        monkeypatch.setenv("CATALOG_SEED_FILE", str(seed))
        reset_catalog()

        quote = PriceResolver().resolve("Lens", "20")
        assert quote.unit_price == Decimal("800000")
        assert quote.is_prescription is True

    def test_unknown_adapter(self, monkeypatch):
        monkeypatch.setenv("CATALOG_ADAPTER", "graphql")
        reset_catalog()
        with pytest.raises(ValueError):
            get_catalog()


def _store_profile(user_id="user-1", **overrides):
    values = {"user_id": user_id, "profile_name": "Daily", "right_sph": -2.0}
    values.update(overrides)
    profile = PrescriptionProfile.create(**values)
    current_domain.repository_for(PrescriptionProfile).add(profile)
    return str(profile.id)


class TestPrescriptionResolver:
    def test_resolve_by_profile(self):
        profile_id = _store_profile()
        descriptor = PrescriptionResolver().resolve_by_profile("user-1", profile_id)
        assert descriptor.source == PrescriptionSource.PROFILE
        assert descriptor.profile_id == profile_id
        assert descriptor.right["sph"] == -2.0
        assert descriptor.left is None
        assert descriptor.requires_prescription is True

    def test_profile_of_another_user(self):
        profile_id = _store_profile(user_id="user-2")
        with pytest.raises(Unauthorized):
            PrescriptionResolver().resolve_by_profile("user-1", profile_id)

    def test_deactivated_profile_of_another_user_is_unauthorized(self):
        profile_id = _store_profile(user_id="user-2")
        repo = current_domain.repository_for(PrescriptionProfile)
        profile = repo.get(profile_id)
        profile.deactivate()
        repo.add(profile)

        with pytest.raises(Unauthorized):
            PrescriptionResolver().resolve_by_profile("user-1", profile_id)

    def test_own_deactivated_profile_is_not_found(self):
        profile_id = _store_profile()
        repo = current_domain.repository_for(PrescriptionProfile)
        profile = repo.get(profile_id)
        profile.deactivate()
        repo.add(profile)

        with pytest.raises(ProfileNotFound):
            PrescriptionResolver().resolve_by_profile("user-1", profile_id)

    def test_missing_profile(self):
        with pytest.raises(ProfileNotFound):
            PrescriptionResolver().resolve_by_profile("user-1", "missing")

    def test_resolve_inline(self):
        descriptor = PrescriptionResolver().resolve_inline('{"os": {"sph": 1.5}, "lensProductId": 20}')
        assert descriptor.source == PrescriptionSource.INLINE
        assert descriptor.left == {"sph": "1.50"}
        assert descriptor.lens_product_id == "20"
        assert descriptor.requires_prescription is True

    def test_deeply_nested_inline_payload_is_malformed(self):
        with pytest.raises(MalformedPrescriptionPayload):
            PrescriptionResolver().resolve_inline('{"right":' * 100000 + "1" + "}" * 100000)

    def test_profile_keeps_explicit_requires_prescription_flag(self):
        profile_id = _store_profile(right_sph=0.0, requires_prescription=True)
        descriptor = PrescriptionResolver().resolve_by_profile("user-1", profile_id)
        assert descriptor.requires_prescription is True

    def test_fee_for_prescription_lens_uses_default(self, catalog):
        resolver = PrescriptionResolver()
        descriptor = resolver.resolve_inline({"right": {"sph": -1}})
        assert resolver.fee_for(descriptor, PriceResolver().resolve("Lens", "20")) == Decimal("500000")

    def test_fee_default_is_configurable(self, catalog, monkeypatch):
        monkeypatch.setenv("PRESCRIPTION_FEE_DEFAULT", "450000")
        resolver = PrescriptionResolver()
        descriptor = resolver.resolve_inline({"right": {"sph": -1}})
        assert resolver.fee_for(descriptor, PriceResolver().resolve("Lens", "20")) == Decimal("450000")

    def test_no_fee_without_descriptor(self, catalog):
        assert PrescriptionResolver().fee_for(None, PriceResolver().resolve("Lens", "20")) == Decimal("0")

    def test_no_fee_for_frames(self, catalog):
        resolver = PrescriptionResolver()
        descriptor = resolver.resolve_inline({"right": {"sph": -1}})
        assert resolver.fee_for(descriptor, PriceResolver().resolve("Frame", "10")) == Decimal("0")

    def test_active_profile(self):
        profile_id = _store_profile()
        resolver = PrescriptionResolver()
        assert resolver.active_profile(profile_id) is not None
        assert resolver.active_profile("missing") is None
        assert resolver.active_profile(None) is None
