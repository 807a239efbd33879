# bingeboard/main.py: app factory, CORS, error handler and router mounting

from __future__ import annotations

import logging
import traceback
from contextlib import asynccontextmanager
from typing import Any, Dict, List

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bingeboard.core.exceptions import AppException
from bingeboard.core.settings import settings
from bingeboard.infra import cache

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("startup")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    await cache.close()


app = FastAPI(
    title="BingeBoard API",
    version="1.0.0",
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url=None,
    lifespan=lifespan,
)

# ───────────────── CORS ─────────────────
# The session cookie is sent cross-origin by the frontend, so credentials are allowed.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_origin_regex=settings.cors_origin_regex or None,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ───────────────── Errors ─────────────────
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    if exc.status_code >= 500:
        log.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, "details": exc.details},
    )


@app.get("/api/_debug/routes", tags=["default"])
async def list_routes() -> List[Dict[str, Any]]:
    out = []
    for r in app.routes:
        methods = sorted(getattr(r, "methods", []) or [])
        out.append({"path": r.path, "methods": methods, "name": getattr(r, "name", "")})
    return out


# Single API namespace prefix
api = APIRouter(prefix="/api")


def _include(router_import: str, attr: str = "router", *, name_hint: str = "") -> None:
    """
    Import a router lazily and include it.
    A broken router is logged with its full traceback instead of taking the app down.
    """
    label = name_hint or router_import
    try:
        mod = __import__(router_import, fromlist=[attr])
        router = getattr(mod, attr)
        api.include_router(router)
        log.info("Mounted router: %s (prefix=%s)", label, getattr(router, "prefix", ""))
    except Exception as e:
        tb = traceback.format_exc()
        log.error("FAILED to mount router: %s (%s)", label, router_import)
        log.error("Reason: %r", e)
        log.error("Traceback:\n%s", tb)


# ───────────────── Mount routers ─────────────────
# watched before users: /users/recently-watched must win over /users/{username}
_include("bingeboard.routes.health", name_hint="health")
_include("bingeboard.routes.auth", name_hint="auth")
_include("bingeboard.routes.watched", name_hint="watched")
_include("bingeboard.routes.users", name_hint="users")
_include("bingeboard.routes.watchlist", name_hint="watchlist")
_include("bingeboard.routes.reviews", name_hint="reviews")
_include("bingeboard.routes.friends", name_hint="friends")
_include("bingeboard.routes.activities", name_hint="activities")
_include("bingeboard.routes.shows", name_hint="shows")

app.include_router(api)
