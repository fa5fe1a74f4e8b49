from __future__ import annotations

import logging
import os
import time
from urllib.parse import urlparse

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import Response
from starlette.staticfiles import StaticFiles
from starlette.status import HTTP_403_FORBIDDEN

from lecturequiz.constants import APP_NAME, APP_VERSION
from lecturequiz.utils.logger_setup import bind_request, reset_request
from lecturequiz.web.core.deps import (
    IS_PROD,
    SESSION_SECRET,
    STATIC_DIR,
    llm,
    sessions,
    templates,
)
from lecturequiz.web.core.ratelimit import limiter
from lecturequiz.web.routes.pages import router as pages_router
from lecturequiz.web.routes.quiz_api import router as quiz_router

log = logging.getLogger("LectureQuiz")

# -----------------------------
# App
# -----------------------------
app = FastAPI(title=APP_NAME, version=APP_VERSION)

# -----------------------------
# Rate limiting
# -----------------------------
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(RateLimitExceeded)
async def ratelimit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse({"error": "Too many requests. Slow down."}, status_code=429)


# -----------------------------
# Request log context
# -----------------------------
# registered before SessionMiddleware so it runs inside it and can read the sid
@app.middleware("http")
async def request_log_context(request: Request, call_next):
    token = bind_request(
        sid=request.session.get("sid", ""),
        route=f"{request.method} {request.url.path}",
    )
    started = time.perf_counter()
    try:
        response = await call_next(request)
        log.debug(
            "%s -> %d (%.0f ms)",
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response
    finally:
        reset_request(token)


# -----------------------------
# Sessions
# -----------------------------
app.add_middleware(
    SessionMiddleware,
    secret_key=SESSION_SECRET,
    same_site="lax",
    https_only=bool(IS_PROD),
    max_age=60 * 60 * 24,
)

# -----------------------------
# Static
# -----------------------------
os.makedirs(STATIC_DIR, exist_ok=True)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# shared state
app.state.templates = templates
app.state.llm = llm
app.state.sessions = sessions


# -----------------------------
# CSRF origin guard (same-origin)
# -----------------------------
@app.middleware("http")
async def csrf_same_host_guard(request: Request, call_next):
    if request.method in ("POST", "PUT", "DELETE", "PATCH"):
        origin = request.headers.get("origin")
        referer = request.headers.get("referer")
        base_host = urlparse(str(request.base_url)).netloc

        # non-browser clients send neither header
        if origin or referer:
            source = origin or referer
            if urlparse(source).netloc != base_host:
                log.warning("CSRF blocked | path=%s source=%s", request.url.path, source)
                return Response("CSRF blocked", status_code=HTTP_403_FORBIDDEN)

    return await call_next(request)


# -----------------------------
# Security headers
# -----------------------------
@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)

    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Permissions-Policy"] = "camera=(), microphone=(), geolocation=()"

    csp = (
        "default-src 'self'; "
        "base-uri 'self'; "
        "object-src 'none'; "
        "frame-ancestors 'none'; "
        "img-src 'self' data:; "
        "style-src 'self' 'unsafe-inline'; "
        "script-src 'self'; "
        "connect-src 'self';"
    )

    response.headers["Content-Security-Policy"] = csp
    return response


# -----------------------------
# Routes
# -----------------------------
app.include_router(pages_router)
app.include_router(quiz_router)
