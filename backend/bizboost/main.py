# bizboost/main.py
import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tortoise.exceptions import BaseORMException, IntegrityError

from bizboost.config import settings
from bizboost.core.db import init_db, close_db
from bizboost.core.bootstrap import ensure_default_admin
from bizboost.api.deps import api_rate_limit
from bizboost.api.routers import auth, businesses, reviews, deals, bookmarks
from bizboost.services.sessions import sweep_expired_sessions
from bizboost.services.sweepers import start_sweepers, stop_sweepers

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_sweeper_tasks = []


# ===== Error boundary =====
@app.exception_handler(RequestValidationError)
async def on_validation_error(request: Request, exc: RequestValidationError):
    """Malformed or missing body/query fields are a 400 with one entry per field."""
    fields = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {"code": "VALIDATION_ERROR", "message": "Invalid request", "fields": fields}},
    )


@app.exception_handler(IntegrityError)
async def on_integrity_error(request: Request, exc: IntegrityError):
    # A unique constraint lost a race against a concurrent request
    logger.warning("[db] integrity error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {"code": "CONFLICT", "message": "Resource already exists"}},
    )


@app.exception_handler(BaseORMException)
async def on_storage_error(request: Request, exc: BaseORMException):
    logger.exception("[db] storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
    )


# ===== Lifecycle =====
@app.on_event("startup")
async def on_startup():
    await init_db()
    # Ensure there's a default admin account on first run
    await ensure_default_admin()
    # Sessions that expired while the server was down
    await sweep_expired_sessions()
    _sweeper_tasks.extend(start_sweepers())
    logger.info("[startup] %s ready (env=%s)", settings.APP_NAME, settings.env)


@app.on_event("shutdown")
async def on_shutdown():
    await stop_sweepers(_sweeper_tasks)
    _sweeper_tasks.clear()
    await close_db()


# REST (every /api route shares the general rate limit)
api_limits = [Depends(api_rate_limit)]
app.include_router(auth.router, prefix="/api", dependencies=api_limits)
app.include_router(businesses.router, prefix="/api", dependencies=api_limits)
app.include_router(reviews.router, prefix="/api", dependencies=api_limits)
app.include_router(deals.router, prefix="/api", dependencies=api_limits)
app.include_router(bookmarks.router, prefix="/api", dependencies=api_limits)


@app.get("/healthz")
def healthz():
    return {"ok": True}
