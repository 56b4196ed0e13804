"""Shared BDD fixtures and step definitions for the cart."""

import json
from decimal import Decimal

import pytest
from eyecart.cart.items import AddToCart
from eyecart.cart.locking import process_for_user
from eyecart.cart.totals import compute_breakdown
from eyecart.catalog import set_catalog
from eyecart.catalog.memory_adapter import InMemoryCatalog
from eyecart.prescription.management import CreatePrescriptionProfile
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def user_id():
    return "user-001"


@pytest.fixture()
def lines():
    """Line ids by product id, filled in by Given/When steps."""
    return {}


@pytest.fixture()
def profiles():
    return {}


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


def add(user_id, product_type, product_id, quantity=1, inline=None, profile_id=None):
    return process_for_user(
        user_id,
        AddToCart(
            user_id=user_id,
            product_type=product_type,
            product_id=product_id,
            quantity=quantity,
            inline_prescription=json.dumps(inline) if inline is not None else None,
            prescription_profile_id=profile_id,
        ),
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse(
        'the catalog offers frame "{frame_id}" at {frame_price:d} and prescription lens "{lens_id}" at {lens_price:d}'
    ),
    target_fixture="catalog",
)
def seeded_catalog(frame_id, frame_price, lens_id, lens_price):
    catalog = InMemoryCatalog()
    catalog.add_product(frame_id, "Frame", Decimal(frame_price))
    catalog.add_product(lens_id, "Lens", Decimal(lens_price), is_prescription=True)
    set_catalog(catalog)
    return catalog


@given(parsers.cfparse('the customer added frame "{product_id}"'))
def added_frame(user_id, lines, product_id):
    lines[product_id] = add(user_id, "Frame", product_id)


@given(parsers.cfparse('the customer added lens "{product_id}" with an inline prescription of sph {sph:g}'))
def added_lens_inline(user_id, lines, product_id, sph):
    lines[product_id] = add(user_id, "Lens", product_id, inline={"right": {"sph": sph}, "lensProductId": product_id})
    lines["lens"] = lines[product_id]


@given(parsers.cfparse('the customer added lens "{product_id}" with their saved profile'))
def added_lens_profile(user_id, lines, profiles, product_id):
    lines["lens"] = add(user_id, "Lens", product_id, profile_id=profiles["own"])


@given("the customer saved a prescription profile")
def own_profile(user_id, profiles):
    profiles["own"] = process_for_user(
        user_id, CreatePrescriptionProfile(user_id=user_id, profile_name="Daily", right_sph=-2.0, left_sph=-1.5)
    )


@given("another customer saved a prescription profile")
def foreign_profile(profiles):
    profiles["other"] = process_for_user(
        "user-999", CreatePrescriptionProfile(user_id="user-999", profile_name="Theirs", right_sph=-3.0)
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart subtotal is {amount:d}"))
def cart_subtotal(user_id, amount):
    assert compute_breakdown(user_id).subtotal_base == Decimal(amount)


@then(parsers.cfparse("the prescription fees total {amount:d}"))
def cart_fees(user_id, amount):
    assert compute_breakdown(user_id).prescription_fees_total == Decimal(amount)


@then(parsers.cfparse("the grand total is {amount:d}"))
def cart_grand_total(user_id, amount):
    breakdown = compute_breakdown(user_id)
    assert breakdown.grand_total == Decimal(amount)
    assert breakdown.grand_total == breakdown.subtotal_base + breakdown.prescription_fees_total


@then(parsers.cfparse('the request fails with "{code}"'))
def request_failed(error, code):
    assert error["exc"] is not None
    assert error["exc"].code == code
