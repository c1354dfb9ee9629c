"Assignment Portal API"
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from core.errors import PortalError, ValidationFailure
from web import config as _cfg
from web import wiring
from web.responses import PRIVATE_NO_STORE, error_response, json_private


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out/opt-in via PORTAL_ENABLE_DOTENV (default true
      outside pytest).
    """
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("PORTAL_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    load_dotenv()

# Minimal production safety checks (fail-fast on insecure config)
_cfg.ensure_secure_config_on_startup()

logger = logging.getLogger("portal.web")

app = FastAPI(
    title="Assignment Portal",
    description="Courses, assignments, submissions and grading for teachers and students",
    version="0.1.0",
)

from web.routes.auth import auth_router
from web.routes.learning import learning_router
from web.routes.teaching import teaching_router
from web.routes.users import users_router

# --- Auth Middleware ------------------------------------------------------------

_PUBLIC_API_PATHS = frozenset({"/api/signup", "/api/signin"})


def _is_public_path(path: str) -> bool:
    return path in _PUBLIC_API_PATHS or not path.startswith("/api/")


@app.middleware("http")
async def auth_enforcement(request: Request, call_next):
    """Resolve the bearer credential for every protected API path.

    The resolved `Identity` is exposed read-only on `request.state.identity`.
    Failures never reach a route: 401 for credential problems, 502 when the
    store cannot be read.
    """
    path = request.url.path
    if request.method == "OPTIONS" or _is_public_path(path):
        return await call_next(request)
    try:
        identity = await wiring.identity_resolver().resolve(request.headers.get("Authorization"))
    except PortalError as exc:
        if exc.status_code == 401:
            logger.warning("Rejected %s %s: %s", request.method, path, exc.detail)
        return error_response(exc)
    except Exception:
        logger.exception("Identity resolution crashed for %s %s", request.method, path)
        return json_private({"error": "internal_error"}, status_code=500)
    request.state.identity = identity
    return await call_next(request)

# --- Security Headers Middleware ----------------------------------------------

@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    # Baseline headers for a JSON-only API
    response.headers.setdefault("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    for name, value in PRIVATE_NO_STORE.items():
        response.headers.setdefault(name, value)
    return response

# Added last so it is the outermost layer and answers preflights itself.
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cfg.get_cors_origins(),
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# --- Error Mapping ----------------------------------------------------------------

@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.warning("Upstream failure on %s %s: %s", request.method, request.url.path, exc.detail)
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(ValidationFailure("Invalid request body"))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return json_private({"error": "internal_error"}, status_code=500)

# --- Routes -------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(teaching_router)
app.include_router(learning_router)


if __name__ == "__main__":
    import uvicorn

    level_name = os.getenv("LOG_LEVEL", "INFO")
    logging.basicConfig(level=level_name.strip().upper() or "INFO")
    uvicorn.run(
        "web.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )
