import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from src.config.settings import settings
from src.database import client as db_client
from src.features.auth.exceptions import AUTH_EXCEPTIONS, auth_exception_handler
from src.features.auth.router import router as auth_router
from src.features.user.router import router as user_router
from src.shared.middlewares.docs_middleware import admin_docs_middleware
from src.shared.middlewares.rate_limit import limiter, rate_limit_handler

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Handle startup and shutdown events."""
    # Startup
    configure_logging()
    await db_client.init_db()
    yield
    # Shutdown
    await db_client.close_db()


# Admin-only API documentation
# Routes are protected by admin_docs_middleware
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Add rate limiting middleware
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_middleware(SlowAPIMiddleware)

# Auth errors carry their stable code next to the detail
for exc_class in AUTH_EXCEPTIONS:
    app.add_exception_handler(exc_class, auth_exception_handler)

# Add admin-only documentation middleware
app.middleware("http")(admin_docs_middleware)

if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

# Router Registration
routers: list[APIRouter] = [
    auth_router,
    user_router,
]

for router in routers:
    app.include_router(router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {"message": settings.app_name, "status": "running"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
