"""Pydantic request/response schemas for the cart API.

These are external contracts, kept apart from the internal Protean commands.
"""

from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from eyecart.shared.money import quantize_for_display


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class EyeSchema(BaseModel):
    sph: float | None = None
    cyl: float | None = None
    axis: int | None = None


# ---------------------------------------------------------------------------
# Cart request schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_type: Literal["Frame", "Lens", "Service"]
    product_id: str
    # Range is enforced by the domain so the error carries its code
    quantity: int = 1
    inline_prescription: dict[str, Any] | None = None
    prescription_profile_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_type": "Lens",
                    "product_id": "20",
                    "quantity": 1,
                    "inline_prescription": {
                        "right": {"sph": -1.25, "cyl": -0.5, "axis": 90},
                        "left": {"sph": -1.0},
                        "lensProductId": "20",
                    },
                }
            ]
        }
    }


class UpdateCartQuantityRequest(BaseModel):
    quantity: int


class InlinePrescriptionRequest(BaseModel):
    payload: dict[str, Any]


class ProfilePrescriptionRequest(BaseModel):
    profile_id: str | None = None


class SaveAsProfileRequest(BaseModel):
    profile_name: str = Field(min_length=1, max_length=100)


class CreatePrescriptionProfileRequest(BaseModel):
    profile_name: str = Field(min_length=1, max_length=100)
    right: EyeSchema | None = None
    left: EyeSchema | None = None

    @model_validator(mode="after")
    def at_least_one_eye(self):
        if self.right is None and self.left is None:
            raise ValueError("At least one eye is required")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class LineIdResponse(BaseModel):
    line_id: str


class ProfileIdResponse(BaseModel):
    profile_id: str


class ClearCartResponse(BaseModel):
    status: str = "ok"
    removed_line_count: int


class LineResponse(BaseModel):
    line_id: str
    product_type: str
    product_id: str
    quantity: int
    unit_price: Decimal
    prescription_fee: Decimal
    line_total: Decimal
    attachment_kind: str
    effective_attachment_kind: str
    profile_id: str | None = None
    prescription: dict[str, Any] | None = None
    referenced_lens_product_id: str | None = None
    is_purchasable: bool


class CartBreakdownResponse(BaseModel):
    user_id: str
    currency: str
    lines: list[LineResponse]
    subtotal_base: Decimal
    prescription_fees_total: Decimal
    grand_total: Decimal
    is_purchasable: bool

    @classmethod
    def from_breakdown(cls, breakdown) -> "CartBreakdownResponse":
        """Render a breakdown, rounding amounts for the cart's currency."""
        currency = breakdown.currency

        def money(value):
            return quantize_for_display(value, currency)

        return cls(
            user_id=breakdown.user_id,
            currency=currency,
            lines=[
                LineResponse(
                    line_id=line.line_id,
                    product_type=line.product_type,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=money(line.unit_price),
                    prescription_fee=money(line.prescription_fee),
                    line_total=money(line.line_total),
                    attachment_kind=line.attachment_kind,
                    effective_attachment_kind=line.effective_attachment_kind,
                    profile_id=line.profile_id,
                    prescription=line.prescription,
                    referenced_lens_product_id=line.referenced_lens_product_id,
                    is_purchasable=line.is_purchasable,
                )
                for line in breakdown.lines
            ],
            subtotal_base=money(breakdown.subtotal_base),
            prescription_fees_total=money(breakdown.prescription_fees_total),
            grand_total=money(breakdown.grand_total),
            is_purchasable=breakdown.is_purchasable,
        )
