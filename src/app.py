"""Hardware store category service.

FastAPI application serving the category hierarchy. Commands are processed
synchronously; every request runs inside the hierarchy domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from hierarchy/domain.toml:
#   - unset / "test" → in-memory provider
#   - "production"   → SQLite provider (run `python src/manage.py setup-db`)
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from hierarchy.domain import hierarchy  # noqa: E402
from hierarchy.utils.logging import add_context, clear_context

hierarchy.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Hardware Store Categories API",
    description="Category hierarchy for inventory and point of sale",
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
    """Push the hierarchy domain context and tag log lines with a request id."""
    add_context(request_id=request.headers.get("x-request-id") or str(uuid4()), path=request.url.path)
    try:
        if request.url.path.startswith("/categories"):
            with hierarchy.domain_context():
                return await call_next(request)
        # Health check, docs, etc.
        return await call_next(request)
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from hierarchy.api import category_router, register_hierarchy_exception_handlers  # noqa: E402

app.include_router(category_router)
register_hierarchy_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"hierarchy": {"name": hierarchy.name}},
        }
    )
