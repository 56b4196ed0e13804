"""Faker-based data generators for Locust load test scenarios.

Product ids match loadtests/catalog_seed.json, which the server must load
(CATALOG_SEED_FILE) for the journeys to find anything to buy. Payloads match
the field names of the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

FRAME_IDS = ["10", "11", "12"]
PRESCRIPTION_LENS_IDS = ["20", "22"]
PLAIN_LENS_IDS = ["21"]
SERVICE_IDS = ["30"]


def user_id() -> str:
    return f"lt-user-{uuid.uuid4().hex[:10]}"


def _quarter_diopters(low: float, high: float) -> float:
    steps = int((high - low) / 0.25)
    return low + 0.25 * random.randint(0, steps)


def eye_data(with_cylinder: bool | None = None) -> dict:
    """One eye's values, inside the accepted ranges."""
    eye = {"sph": _quarter_diopters(-8.0, 4.0)}
    if with_cylinder if with_cylinder is not None else random.random() < 0.4:
        eye["cyl"] = _quarter_diopters(-3.0, -0.25)
        eye["axis"] = random.randint(0, 180)
    return eye


def inline_prescription(lens_id: str | None = None) -> dict:
    payload = {"right": eye_data(), "left": eye_data()}
    if lens_id is not None:
        payload["lensProductId"] = lens_id
    return payload


def frame_line() -> dict:
    return {"product_type": "Frame", "product_id": random.choice(FRAME_IDS), "quantity": 1}


def prescription_lens_line() -> dict:
    lens_id = random.choice(PRESCRIPTION_LENS_IDS)
    return {
        "product_type": "Lens",
        "product_id": lens_id,
        "quantity": 1,
        "inline_prescription": inline_prescription(lens_id),
    }


def plain_lens_line() -> dict:
    return {"product_type": "Lens", "product_id": random.choice(PLAIN_LENS_IDS), "quantity": random.randint(1, 2)}


def service_line() -> dict:
    return {"product_type": "Service", "product_id": random.choice(SERVICE_IDS), "quantity": 1}


def profile_data() -> dict:
    return {
        "profile_name": f"{fake.word().capitalize()} glasses",
        "right": eye_data(),
        "left": eye_data(),
    }


def profile_name() -> str:
    return f"{fake.first_name()}'s {random.choice(['reading', 'distance', 'computer'])} prescription"
