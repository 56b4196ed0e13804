"""Inline prescription payloads.

An inline payload is free-form structured data entered while configuring a
lens during add-to-cart, before the customer has a saved profile::

    {
        "right": {"sph": -1.25, "cyl": -0.5, "axis": 90},
        "left": {"sph": -1.0},
        "lensProductId": "20",
        "requiresPrescription": true
    }

``od``/``os`` are accepted as aliases for ``right``/``left``. Unknown keys are
kept as-is. Validation here is structural only (types, presence, field
bounds); nothing checks that a prescription makes medical sense.
"""

import json
from decimal import Decimal, InvalidOperation

from eyecart.prescription.profile import AXIS_RANGE, CYL_RANGE, SPH_RANGE
from eyecart.shared.errors import MalformedPrescriptionPayload

LENS_REFERENCE_KEY = "lensProductId"
REQUIRES_PRESCRIPTION_KEY = "requiresPrescription"

_EYE_ALIASES = {"right": ("right", "od"), "left": ("left", "os")}
_ALIAS_KEYS = {alias for aliases in _EYE_ALIASES.values() for alias in aliases}
_DIOPTER_STEP = Decimal("0.01")


def _load(payload):
    if isinstance(payload, str | bytes):
        try:
            payload = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
            raise MalformedPrescriptionPayload("Prescription payload is not valid JSON") from None
    if not isinstance(payload, dict):
        raise MalformedPrescriptionPayload("Prescription payload must be a JSON object")
    return payload


def _diopters(value, field, bounds, errors):
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        errors.setdefault(field, []).append("must be a number")
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        errors.setdefault(field, []).append("must be a number")
        return None
    if not number.is_finite() or not (Decimal(str(bounds[0])) <= number <= Decimal(str(bounds[1]))):
        errors.setdefault(field, []).append(f"must be between {bounds[0]} and {bounds[1]}")
        return None
    if number != number.quantize(_DIOPTER_STEP):
        errors.setdefault(field, []).append("must have at most two decimal places")
        return None
    return format(number.quantize(_DIOPTER_STEP), "f")


def _axis(value, field, errors):
    if isinstance(value, bool) or not isinstance(value, int | str):
        errors.setdefault(field, []).append("must be an integer")
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        errors.setdefault(field, []).append("must be an integer")
        return None
    if not AXIS_RANGE[0] <= number <= AXIS_RANGE[1]:
        errors.setdefault(field, []).append(f"must be between {AXIS_RANGE[0]} and {AXIS_RANGE[1]}")
        return None
    return number


def _eye(side, raw, errors):
    if not isinstance(raw, dict):
        errors.setdefault(side, []).append("must be an object")
        return None

    eye = {}
    if raw.get("sph") is None:
        errors.setdefault(f"{side}.sph", []).append("is required")
    else:
        eye["sph"] = _diopters(raw["sph"], f"{side}.sph", SPH_RANGE, errors)

    if raw.get("cyl") is not None:
        eye["cyl"] = _diopters(raw["cyl"], f"{side}.cyl", CYL_RANGE, errors)

    if raw.get("axis") is not None:
        eye["axis"] = _axis(raw["axis"], f"{side}.axis", errors)

    cyl = eye.get("cyl")
    if cyl is not None and Decimal(cyl) != 0 and eye.get("axis") is None and f"{side}.axis" not in errors:
        errors.setdefault(f"{side}.axis", []).append("is required when cyl is non-zero")

    return eye


def normalize_inline_payload(payload) -> dict:
    """Validate an inline payload and return its canonical form.

    Eye aliases are folded, diopters become fixed two-decimal strings and the
    lens reference becomes a string, so two payloads describing the same
    prescription compare equal. Raises MalformedPrescriptionPayload.
    """
    data = _load(payload)
    errors: dict[str, list[str]] = {}
    canonical = {key: value for key, value in data.items() if key not in _ALIAS_KEYS}

    present_sides = 0
    for side, aliases in _EYE_ALIASES.items():
        supplied = [alias for alias in aliases if data.get(alias) is not None]
        if len(supplied) > 1:
            errors.setdefault(side, []).append(f"given more than once ({', '.join(supplied)})")
            continue
        if not supplied:
            continue
        present_sides += 1
        eye = _eye(side, data[supplied[0]], errors)
        if eye is not None:
            canonical[side] = eye

    if present_sides == 0 and not errors:
        errors["eyes"] = ["at least one of 'right' or 'left' is required"]

    if REQUIRES_PRESCRIPTION_KEY in data and not isinstance(data[REQUIRES_PRESCRIPTION_KEY], bool):
        errors.setdefault(REQUIRES_PRESCRIPTION_KEY, []).append("must be a boolean")

    if data.get(LENS_REFERENCE_KEY) is not None:
        lens_id = _lens_reference(data[LENS_REFERENCE_KEY])
        if lens_id is None:
            errors.setdefault(LENS_REFERENCE_KEY, []).append("must be a product identifier")
        else:
            canonical[LENS_REFERENCE_KEY] = lens_id

    if errors:
        raise MalformedPrescriptionPayload("Prescription payload is incomplete or malformed", errors=errors)
    return canonical


def canonical_json(payload: dict) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def _lens_reference(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def extract_referenced_lens_product(payload) -> str | None:
    """Return the lens product an inline payload was configured for.

    Display-only and deliberately forgiving: anything unreadable (bad JSON,
    non-object payloads, odd value types) yields None instead of raising.
    """
    if payload is None:
        return None
    try:
        data = json.loads(payload) if isinstance(payload, str | bytes) else payload
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError, TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    return _lens_reference(data.get(LENS_REFERENCE_KEY))
