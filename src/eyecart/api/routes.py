"""FastAPI routes for carts and prescription profiles.

Every cart mutation is processed while holding the user's cart lock. The
lock blocks, so routes are plain functions that FastAPI runs in its threadpool.
"""

import json

from fastapi import APIRouter

from eyecart.api.schemas import (
    AddToCartRequest,
    CartBreakdownResponse,
    ClearCartResponse,
    CreatePrescriptionProfileRequest,
    InlinePrescriptionRequest,
    LineIdResponse,
    ProfileIdResponse,
    ProfilePrescriptionRequest,
    SaveAsProfileRequest,
    StatusResponse,
    UpdateCartQuantityRequest,
)
from eyecart.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from eyecart.cart.locking import process_for_user
from eyecart.cart.management import ClearCart
from eyecart.cart.prescriptions import (
    SaveLinePrescriptionAsProfile,
    SetLinePrescriptionByProfile,
    SetLinePrescriptionInline,
)
from eyecart.cart.totals import compute_breakdown
from eyecart.prescription.management import CreatePrescriptionProfile, DeactivatePrescriptionProfile

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{user_id}", response_model=CartBreakdownResponse)
def get_cart(user_id: str) -> CartBreakdownResponse:
    return CartBreakdownResponse.from_breakdown(compute_breakdown(user_id))


@cart_router.post("/{user_id}/lines", status_code=201, response_model=LineIdResponse)
def add_to_cart(user_id: str, body: AddToCartRequest) -> LineIdResponse:
    command = AddToCart(
        user_id=user_id,
        product_type=body.product_type,
        product_id=body.product_id,
        quantity=body.quantity,
        inline_prescription=json.dumps(body.inline_prescription) if body.inline_prescription is not None else None,
        prescription_profile_id=body.prescription_profile_id,
    )
    line_id = process_for_user(user_id, command)
    return LineIdResponse(line_id=line_id)


@cart_router.put("/{user_id}/lines/{line_id}", response_model=StatusResponse)
def update_cart_quantity(user_id: str, line_id: str, body: UpdateCartQuantityRequest) -> StatusResponse:
    command = UpdateCartQuantity(user_id=user_id, line_id=line_id, new_quantity=body.quantity)
    process_for_user(user_id, command)
    return StatusResponse()


@cart_router.delete("/{user_id}/lines/{line_id}", response_model=StatusResponse)
def remove_from_cart(user_id: str, line_id: str) -> StatusResponse:
    process_for_user(user_id, RemoveFromCart(user_id=user_id, line_id=line_id))
    return StatusResponse()


@cart_router.post("/{user_id}/clear", response_model=ClearCartResponse)
def clear_cart(user_id: str) -> ClearCartResponse:
    removed = process_for_user(user_id, ClearCart(user_id=user_id))
    return ClearCartResponse(removed_line_count=removed or 0)


@cart_router.put("/{user_id}/lines/{line_id}/prescription/inline", response_model=StatusResponse)
def set_inline_prescription(user_id: str, line_id: str, body: InlinePrescriptionRequest) -> StatusResponse:
    command = SetLinePrescriptionInline(user_id=user_id, line_id=line_id, payload=json.dumps(body.payload))
    process_for_user(user_id, command)
    return StatusResponse()


@cart_router.put("/{user_id}/lines/{line_id}/prescription/profile", response_model=StatusResponse)
def set_profile_prescription(user_id: str, line_id: str, body: ProfilePrescriptionRequest) -> StatusResponse:
    command = SetLinePrescriptionByProfile(user_id=user_id, line_id=line_id, profile_id=body.profile_id)
    process_for_user(user_id, command)
    return StatusResponse()


@cart_router.post(
    "/{user_id}/lines/{line_id}/prescription/save", status_code=201, response_model=ProfileIdResponse
)
def save_prescription_as_profile(user_id: str, line_id: str, body: SaveAsProfileRequest) -> ProfileIdResponse:
    command = SaveLinePrescriptionAsProfile(user_id=user_id, line_id=line_id, profile_name=body.profile_name)
    profile_id = process_for_user(user_id, command)
    return ProfileIdResponse(profile_id=profile_id)


# ---------------------------------------------------------------------------
# Prescription Profile Router
# ---------------------------------------------------------------------------
prescription_router = APIRouter(prefix="/prescriptions", tags=["prescriptions"])


@prescription_router.post("/{user_id}", status_code=201, response_model=ProfileIdResponse)
def create_profile(user_id: str, body: CreatePrescriptionProfileRequest) -> ProfileIdResponse:
    right = body.right.model_dump() if body.right else {}
    left = body.left.model_dump() if body.left else {}
    command = CreatePrescriptionProfile(
        user_id=user_id,
        profile_name=body.profile_name,
        right_sph=right.get("sph"),
        right_cyl=right.get("cyl"),
        right_axis=right.get("axis"),
        left_sph=left.get("sph"),
        left_cyl=left.get("cyl"),
        left_axis=left.get("axis"),
    )
    profile_id = process_for_user(user_id, command)
    return ProfileIdResponse(profile_id=profile_id)


@prescription_router.post("/{user_id}/{profile_id}/deactivate", response_model=StatusResponse)
def deactivate_profile(user_id: str, profile_id: str) -> StatusResponse:
    command = DeactivatePrescriptionProfile(user_id=user_id, profile_id=profile_id)
    process_for_user(user_id, command)
    return StatusResponse()
