import logging
import os
import threading

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from marketplace.routes import auth, jobs, proposals
from marketplace.database.base import Base
from marketplace.database.session import engine
from marketplace.models import Job, Proposal, RevokedToken, User  # noqa: F401
from marketplace.core.config import (
    CORS_ORIGINS,
    CORS_ORIGIN_REGEX,
    PORT,
    parse_cors_origins,
)
from marketplace.core.errors import setup_error_handlers

logger = logging.getLogger("uvicorn.error")
app = FastAPI(title="Freelance Marketplace")

cors_origins = parse_cors_origins(CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_origin_regex=CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

setup_error_handlers(app)


@app.middleware("http")
async def ensure_utf8_json_charset(request: Request, call_next):
    response = await call_next(request)
    content_type = str(response.headers.get("content-type", ""))
    if content_type.startswith("application/json") and "charset=" not in content_type.lower():
        response.headers["content-type"] = "application/json; charset=utf-8"
    return response


def purge_expired_revoked_tokens():
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM revoked_tokens WHERE expires_at < CURRENT_TIMESTAMP"))


def run_db_bootstrap() -> None:
    steps = [
        ("create_all", lambda: Base.metadata.create_all(bind=engine)),
        ("purge_expired_revoked_tokens", purge_expired_revoked_tokens),
    ]
    for step_name, step_fn in steps:
        try:
            step_fn()
        except Exception:  # pragma: no cover - startup hardening
            logger.exception("Database bootstrap step failed: %s", step_name)


_bootstrap_lock = threading.Lock()
_bootstrap_started = False


def trigger_db_bootstrap() -> None:
    global _bootstrap_started
    with _bootstrap_lock:
        if _bootstrap_started:
            return
        _bootstrap_started = True

    mode = str(os.getenv("DB_BOOTSTRAP_MODE", "background") or "background").strip().lower()
    if mode == "off":
        logger.info("DB bootstrap disabled (DB_BOOTSTRAP_MODE=off).")
        return
    if mode == "sync":
        logger.info("Running DB bootstrap synchronously.")
        run_db_bootstrap()
        return

    logger.info("Running DB bootstrap in background.")
    threading.Thread(target=run_db_bootstrap, daemon=True, name="db-bootstrap").start()


app.include_router(auth.router)
app.include_router(jobs.router)
app.include_router(proposals.router)


@app.get("/")
def root():
    return {"message": "API running"}


@app.get("/health")
def healthcheck():
    return {"status": "ok"}


@app.get("/health/db")
def healthcheck_db():
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    return {"status": "ok"}


@app.on_event("startup")
def startup_event():
    trigger_db_bootstrap()


if __name__ == "__main__":
    uvicorn.run("marketplace.main:app", host="0.0.0.0", port=PORT)
