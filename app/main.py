# Application entrypoint: configures middleware (CORS, request gate), startup checks, and API routers.
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from .db import Base, engine, is_sqlite
from .gate import RequestGateMiddleware
from .security import init_verifier
from .routes.auth import router as auth_router
from .routes.properties import router as properties_router
from .routes.inquiries import router as inquiries_router
from .routes.landlord import router as landlord_router
from .routes.admin import router as admin_router

logger = logging.getLogger("studentnest")


# Parse CORS origins from a comma-separated env var.
# '*' cannot be combined with allow_credentials=True (the auth cookie), so it maps to the dev origins.
def _parse_cors_origins(env_value: str | None) -> list[str]:
    default_dev_origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    if not env_value:
        return default_dev_origins

    origins = [o.strip() for o in env_value.split(",") if o.strip()]
    if "*" in origins:
        return default_dev_origins

    return origins


app = FastAPI(title="StudentNest API", version="0.1.0")

# Starlette runs the last-added middleware first: CORS wraps the gate so redirects still carry CORS headers
app.add_middleware(RequestGateMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_parse_cors_origins(os.getenv("CORS_ORIGINS")),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    # Refuses to start in production without a signing secret
    verifier = init_verifier()
    if not verifier.enabled:
        logger.warning("Running without a signing secret; logins are disabled")
    # Local SQLite gets tables created on the fly; other databases rely on Alembic migrations
    if is_sqlite():
        Base.metadata.create_all(bind=engine)


# Liveness probe for orchestrators and uptime checks
@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


app.include_router(auth_router, prefix="/api", tags=["auth"])
app.include_router(properties_router, prefix="/api", tags=["properties"])
app.include_router(inquiries_router, prefix="/api", tags=["inquiries"])
app.include_router(landlord_router, prefix="/api", tags=["landlord"])
app.include_router(admin_router, prefix="/api", tags=["admin"])
