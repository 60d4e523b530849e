"""Food court ordering FastAPI application.

Serves checkout, order management and restaurant endpoints,
plus WebSocket feeds for staff dashboards and guests. Every HTTP request runs
inside the ordering domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
    SEED_FILE=data/seed.json uvicorn src.app:app   # preload restaurants and menus
"""

import os
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from ordering.domain import ordering

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it. PROTEAN_ENV selects
# the config overlay from domain.toml.
ordering.init()

from ordering.api import checkout_router, order_router, realtime_router, restaurant_router  # noqa: E402
from ordering.api.errors import register_ordering_exception_handlers  # noqa: E402
from ordering.catalogue.seeding import load_seed_file  # noqa: E402
from ordering.container import build_services  # noqa: E402
from ordering.utils.logging import bind_request_context, clear_request_context  # noqa: E402


def _allowed_origins() -> list[str]:
    return [origin.strip() for origin in os.environ.get("ALLOWED_ORIGINS", "*").split(",") if origin.strip()]


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Food Court Ordering API",
    description="Multi-restaurant checkout, order workflow and seller settlement",
)
app.state.services = build_services()

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the ordering domain context and tag log lines with a request id."""
    bind_request_context(request_id=request.headers.get("x-request-id", uuid4().hex))
    try:
        with ordering.domain_context():
            return await call_next(request)
    finally:
        clear_request_context()


register_exception_handlers(app)
register_ordering_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(checkout_router)
app.include_router(order_router)
app.include_router(restaurant_router)
app.include_router(realtime_router)

# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------
if os.environ.get("SEED_FILE"):
    with ordering.domain_context():
        load_seed_file(os.environ["SEED_FILE"])


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": ordering.name}})
