"""Application tests for the cart breakdown."""

import json
from decimal import Decimal

import pytest
from eyecart.cart.items import AddToCart, RemoveFromCart
from eyecart.cart.prescriptions import SetLinePrescriptionByProfile
from eyecart.cart.totals import compute_breakdown
from eyecart.prescription.management import CreatePrescriptionProfile, DeactivatePrescriptionProfile
from protean import current_domain

pytestmark = pytest.mark.usefixtures("catalog")

INLINE = {"right": {"sph": -1.25}, "lensProductId": "20"}


def _add(product_type, product_id, quantity=1, inline=None, profile_id=None, user_id="user-1"):
    return current_domain.process(
        AddToCart(
            user_id=user_id,
            product_type=product_type,
            product_id=product_id,
            quantity=quantity,
            inline_prescription=json.dumps(inline) if inline is not None else None,
            prescription_profile_id=profile_id,
        ),
        asynchronous=False,
    )


def _create_profile(user_id="user-1"):
    return current_domain.process(
        CreatePrescriptionProfile(user_id=user_id, profile_name="Daily", right_sph=-2.0), asynchronous=False
    )


class TestEmptyCart:
    def test_user_without_cart(self):
        breakdown = compute_breakdown("user-1")
        assert breakdown.lines == []
        assert breakdown.subtotal_base == Decimal("0")
        assert breakdown.prescription_fees_total == Decimal("0")
        assert breakdown.grand_total == Decimal("0")
        assert breakdown.currency == "VND"
        assert breakdown.is_purchasable is False


class TestFrameAndPrescriptionLens:
    def test_totals(self):
        _add("Frame", "10")
        _add("Lens", "20", inline=INLINE)

        breakdown = compute_breakdown("user-1")
        assert breakdown.subtotal_base == Decimal("1300000")
        assert breakdown.prescription_fees_total == Decimal("500000")
        assert breakdown.grand_total == Decimal("1800000")
        assert breakdown.is_purchasable is True

    def test_line_views(self):
        _add("Frame", "10")
        _add("Lens", "20", inline=INLINE)

        frame, lens = compute_breakdown("user-1").lines
        assert frame.product_type == "Frame"
        assert frame.line_total == Decimal("500000")
        assert frame.effective_attachment_kind == "None"
        assert lens.line_total == Decimal("1300000")
        assert lens.effective_attachment_kind == "Inline"
        assert lens.referenced_lens_product_id == "20"
        assert lens.prescription["right"] == {"sph": "-1.25"}

    def test_removing_the_lens(self):
        _add("Frame", "10")
        lens_line = _add("Lens", "20", inline=INLINE)
        current_domain.process(RemoveFromCart(user_id="user-1", line_id=lens_line), asynchronous=False)

        breakdown = compute_breakdown("user-1")
        assert breakdown.subtotal_base == Decimal("500000")
        assert breakdown.prescription_fees_total == Decimal("0")
        assert breakdown.grand_total == Decimal("500000")

    def test_switching_lens_to_no_prescription(self):
        _add("Frame", "10")
        lens_line = _add("Lens", "20", inline=INLINE)
        current_domain.process(SetLinePrescriptionByProfile(user_id="user-1", line_id=lens_line), asynchronous=False)

        breakdown = compute_breakdown("user-1")
        assert breakdown.prescription_fees_total == Decimal("0")
        assert breakdown.grand_total == Decimal("1300000")

    def test_fees_scale_with_quantity(self):
        _add("Lens", "20", quantity=2, inline=INLINE)
        breakdown = compute_breakdown("user-1")
        assert breakdown.subtotal_base == Decimal("1600000")
        assert breakdown.prescription_fees_total == Decimal("1000000")
        assert breakdown.grand_total == breakdown.subtotal_base + breakdown.prescription_fees_total


class TestDeactivatedProfile:
    def test_line_reads_as_no_prescription(self):
        profile_id = _create_profile()
        _add("Lens", "20", profile_id=profile_id)
        assert compute_breakdown("user-1").prescription_fees_total == Decimal("500000")

        current_domain.process(
            DeactivatePrescriptionProfile(user_id="user-1", profile_id=profile_id), asynchronous=False
        )

        breakdown = compute_breakdown("user-1")
        line = breakdown.lines[0]
        assert line.attachment_kind == "ByProfile"
        assert line.effective_attachment_kind == "None"
        assert line.prescription_fee == Decimal("0")
        assert breakdown.prescription_fees_total == Decimal("0")
        assert breakdown.grand_total == Decimal("800000")


class TestPurchasability:
    def test_inactive_product_keeps_line_and_is_flagged(self, catalog):
        _add("Frame", "10")
        _add("Frame", "11")
        catalog.set_active("11", False)

        breakdown = compute_breakdown("user-1")
        assert len(breakdown.lines) == 2
        assert [line.is_purchasable for line in breakdown.lines] == [True, False]
        assert breakdown.is_purchasable is False
        assert breakdown.subtotal_base == Decimal("1250000")

    def test_product_gone_from_catalog(self, catalog):
        _add("Frame", "10")
        catalog.clear()
        breakdown = compute_breakdown("user-1")
        assert breakdown.lines[0].is_purchasable is False
        assert breakdown.grand_total == Decimal("500000")

    def test_snapshotted_price_survives_catalog_change(self, catalog):
        _add("Frame", "10")
        catalog.set_price("10", "600000")
        assert compute_breakdown("user-1").subtotal_base == Decimal("500000")


class TestLensReferenceDisplay:
    def test_malformed_stored_reference_is_ignored(self):
        _add("Lens", "20", inline={"right": {"sph": -1.25}})
        assert compute_breakdown("user-1").lines[0].referenced_lens_product_id is None
