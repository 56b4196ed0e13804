"""HTTP mapping for cart engine errors."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from eyecart.shared.errors import (
    CartBusy,
    CartError,
    CurrencyMismatch,
    InvalidQuantity,
    LineNotFound,
    MalformedPrescriptionPayload,
    PrescriptionNotApplicable,
    ProductInactive,
    ProductNotFound,
    ProfileNotFound,
    Unauthorized,
)
from eyecart.utils.logging import get_logger

logger = get_logger(__name__)

STATUS_CODES = {
    ProductNotFound: 404,
    ProductInactive: 409,
    InvalidQuantity: 400,
    LineNotFound: 404,
    ProfileNotFound: 404,
    Unauthorized: 403,
    MalformedPrescriptionPayload: 400,
    PrescriptionNotApplicable: 400,
    CurrencyMismatch: 409,
    CartBusy: 503,
}


def status_code_for(exc: CartError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]
    return 400


def register_cart_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CartError)
    async def cart_error_handler(request: Request, exc: CartError):
        status_code = status_code_for(exc)
        logger.info("Cart request rejected", path=request.url.path, code=exc.code, status_code=status_code)
        headers = {"Retry-After": "1"} if exc.retryable else None
        return JSONResponse(status_code=status_code, content={"error": exc.to_dict()}, headers=headers)
