"""
HackOps — FastAPI application entry-point.

Run with:
    uvicorn hackops.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from hackops import models  # noqa: F401  (registers every table on Base.metadata)
from hackops.config import settings
from hackops.database import Base, engine
from hackops.errors import CoordinationError

# ── Import routers ──
from hackops.routers import auth, logistics, teams, volunteer

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan: create tables on startup ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Hackathon coordination core — team formation and logistics distribution.",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Session middleware (volunteer duty binding lives in the signed session) ──
app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY, https_only=not settings.DEBUG)
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=("*",))


# ── Error envelope: {"message", "kind", "reason"} for every failure ──
@app.exception_handler(CoordinationError)
async def coordination_error_handler(request: Request, exc: CoordinationError):
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.kind}/{exc.reason}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0]["msg"] if errors else "Invalid request."
    return JSONResponse(
        status_code=422,
        content={
            "message": first,
            "kind": "validation",
            "reason": "invalid_request",
            "errors": jsonable_encoder(errors),
        },
    )


# ── Register API routers ──
app.include_router(auth.router)
app.include_router(teams.router)
app.include_router(logistics.router)
app.include_router(volunteer.router)


@app.get("/health", tags=["meta"])
async def health():
    return {"ok": True, "app": settings.APP_NAME, "env": settings.ENVIRONMENT}


if not settings.is_production:
    from hackops.schemas.auth import TokenOut
    from hackops.services.principal import issue_token
    from hackops.utils.emails import normalize_email

    @app.get("/mock-login/{email}", response_model=TokenOut, tags=["auth"])
    async def mock_login(email: str):
        """Issue a token without OTP. Development only."""
        normalized = normalize_email(email)
        return TokenOut(
            email=normalized,
            auth_token=issue_token(normalized),
            expires_in_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        )
