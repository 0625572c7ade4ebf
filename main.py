"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import auth_router, tweets_router, users_router
from app.api.routes.auth import limiter
from app.core.config import settings
from app.core.errors import APIError, api_error_handler
from app.db.migrations import run_migrations
from app.db.session import verify_connection


logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    try:
        logger.info("Startup: verifying database connection")
        verify_connection()
        logger.info("Startup: database connection verified")
        app.state.database_url = settings.database_url

        logger.info("Startup: running database migrations")
        try:
            run_migrations()
            logger.info("Startup: migrations completed")
        except Exception as migration_exc:
            logger.error("Startup: migration failed", exc_info=True)
            raise migration_exc
    except Exception:
        logger.error("Startup failure", exc_info=True)
        raise

    yield  # Application runs here

    logger.info("Shutdown: application stopped")


logger.info("Creating FastAPI application instance")
app = FastAPI(lifespan=lifespan)
logger.info("FastAPI application created")

# Rate limiter shared with the auth routes
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_exception_handler(APIError, api_error_handler)

logger.info("Configuring CORS middleware")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {"message": "Server is running"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


logger.info("Registering API routers")
app.include_router(auth_router, prefix="/auth")
app.include_router(users_router, prefix="/user")
app.include_router(tweets_router, prefix="/tweet")
logger.info("Routers registered; application ready to accept requests")
