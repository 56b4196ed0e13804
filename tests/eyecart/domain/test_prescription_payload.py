"""Tests for inline prescription payload normalization."""

import json

import pytest
from eyecart.prescription.payload import (
    canonical_json,
    extract_referenced_lens_product,
    normalize_inline_payload,
)
from eyecart.shared.errors import MalformedPrescriptionPayload


class TestNormalizeInlinePayload:
    def test_diopters_become_two_decimal_text(self):
        canonical = normalize_inline_payload({"right": {"sph": -1.25, "cyl": -0.5, "axis": 90}})
        assert canonical["right"] == {"sph": "-1.25", "cyl": "-0.50", "axis": 90}

    def test_accepts_json_text(self):
        canonical = normalize_inline_payload(json.dumps({"left": {"sph": "2"}}))
        assert canonical["left"] == {"sph": "2.00"}

    def test_eye_aliases_are_folded(self):
        canonical = normalize_inline_payload({"od": {"sph": -1}, "os": {"sph": -1.5}})
        assert set(canonical) == {"right", "left"}

    def test_equivalent_payloads_compare_equal(self):
        a = normalize_inline_payload({"right": {"sph": -1.25}, "lensProductId": 20})
        b = normalize_inline_payload('{"lensProductId": "20", "od": {"sph": "-1.250"}}')
        assert canonical_json(a) == canonical_json(b)

    def test_unknown_keys_are_kept(self):
        canonical = normalize_inline_payload({"right": {"sph": 0}, "pd": 62})
        assert canonical["pd"] == 62

    def test_lens_reference_is_text(self):
        canonical = normalize_inline_payload({"right": {"sph": -1}, "lensProductId": 20})
        assert canonical["lensProductId"] == "20"

    def test_explicit_requires_prescription_flag(self):
        canonical = normalize_inline_payload({"right": {"sph": 0}, "requiresPrescription": True})
        assert canonical["requiresPrescription"] is True


class TestMalformedPayloads:
    @pytest.mark.parametrize(
        "payload",
        [
            "not json",
            "[1, 2]",
            {},
            {"right": "strong"},
            {"right": {"cyl": -0.5, "axis": 90}},
            {"right": {"sph": -1, "cyl": -0.75}},
            {"right": {"sph": -25}},
            {"right": {"sph": -1, "cyl": -7, "axis": 90}},
            {"right": {"sph": -1, "cyl": -1, "axis": 181}},
            {"right": {"sph": -1, "cyl": -1, "axis": 12.5}},
            {"right": {"sph": -1}, "od": {"sph": -1}},
            {"right": {"sph": -1}, "requiresPrescription": "yes"},
        ],
    )
    def test_rejected(self, payload):
        with pytest.raises(MalformedPrescriptionPayload):
            normalize_inline_payload(payload)

    def test_more_than_two_decimal_places_is_rejected(self):
        with pytest.raises(MalformedPrescriptionPayload) as exc_info:
            normalize_inline_payload({"right": {"sph": -1.255}})
        assert "right.sph" in exc_info.value.errors

    def test_deeply_nested_json_is_malformed(self):
        deep = '{"right":' * 100000 + "1" + "}" * 100000
        with pytest.raises(MalformedPrescriptionPayload):
            normalize_inline_payload(deep)

    def test_errors_name_the_field(self):
        with pytest.raises(MalformedPrescriptionPayload) as exc_info:
            normalize_inline_payload({"right": {"sph": -1, "cyl": -0.75}})
        assert "right.axis" in exc_info.value.errors
        assert exc_info.value.to_dict()["code"] == "malformed_prescription_payload"


class TestExtractReferencedLensProduct:
    def test_reads_lens_reference(self):
        assert extract_referenced_lens_product('{"lensProductId": 20}') == "20"

    def test_reads_from_dict(self):
        assert extract_referenced_lens_product({"lensProductId": "lens-7"}) == "lens-7"

    @pytest.mark.parametrize(
        "payload",
        [None, "", "{broken", "42", "[]", '{"lensProductId": {"id": 1}}', '{"lensProductId": null}', b"\xff\xfe"],
    )
    def test_malformed_input_yields_none(self, payload):
        assert extract_referenced_lens_product(payload) is None

    def test_deeply_nested_json_yields_none(self):
        assert extract_referenced_lens_product("[" * 200000 + "]" * 200000) is None
