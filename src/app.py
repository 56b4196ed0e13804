"""Eyecart FastAPI application.

Serves the cart and prescription-profile API, processing commands
synchronously. Every request runs inside the eyecart domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
from eyecart.domain import eyecart  # noqa: E402
from eyecart.utils.logging import add_context, clear_context
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

eyecart.init()

_DOMAIN_ROUTE_PREFIXES = ("/carts", "/prescriptions")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Eyecart API",
    description="Eyewear cart pricing and prescription composition",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the eyecart domain context for cart and prescription requests."""
    if request.url.path.startswith(_DOMAIN_ROUTE_PREFIXES):
        clear_context()
        add_context(method=request.method, path=request.url.path)
        with eyecart.domain_context():
            response = await call_next(request)
        return response
    # Health check, docs
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from eyecart.api import cart_router, prescription_router, register_cart_exception_handlers  # noqa: E402

app.include_router(cart_router)
app.include_router(prescription_router)

register_exception_handlers(app)
register_cart_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": eyecart.name}})
