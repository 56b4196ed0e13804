from eyecart.api.errors import register_cart_exception_handlers
from eyecart.api.routes import cart_router, prescription_router

__all__ = ["cart_router", "prescription_router", "register_cart_exception_handlers"]
