"""Typed failures surfaced by the cart engine.

Every domain error carries a stable ``code`` used by the API layer. Only
``CartBusy`` is transient: callers may retry idempotent reads after it, but
must not blindly retry mutations.
"""


class CartError(Exception):
    """Base class for all cart engine failures."""

    code = "cart_error"
    retryable = False

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, **self.context}


class ProductNotFound(CartError):
    code = "product_not_found"


class ProductInactive(CartError):
    code = "product_inactive"


class InvalidQuantity(CartError):
    code = "invalid_quantity"


class LineNotFound(CartError):
    code = "line_not_found"


class ProfileNotFound(CartError):
    code = "profile_not_found"


class Unauthorized(CartError):
    """Acting user does not own the referenced prescription profile."""

    code = "unauthorized"


class MalformedPrescriptionPayload(CartError):
    code = "malformed_prescription_payload"

    def __init__(self, message: str, errors: dict | None = None, **context):
        super().__init__(message, **context)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.errors:
            data["errors"] = self.errors
        return data


class PrescriptionNotApplicable(CartError):
    code = "prescription_not_applicable"


class CurrencyMismatch(CartError):
    code = "currency_mismatch"


class CartBusy(CartError):
    """The per-user cart lock could not be acquired in time."""

    code = "cart_busy"
    retryable = True
