"""
StudyPath account service - registration, login and session revocation
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings, DEFAULT_JWT_SECRET
from .db import init_db
from . import passwords
from .exceptions import DuplicateEmailError, HashingError, InvalidCredentialsError, InvalidTokenError
from .routes import auth, health
from .session_cache import SessionCache
from .tokens import TokenIssuer
from .utils.event_logger import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create process-scoped resources before serving, release them on shutdown"""
    configure_logging()
    init_db()
    passwords.warm_up()

    if settings.JWT_SECRET == DEFAULT_JWT_SECRET and not settings.is_local:
        logger.warning("JWT_SECRET is not set; using the built-in development secret")
    app.state.token_issuer = TokenIssuer(settings.JWT_SECRET, settings.JWT_ALGORITHM)

    app.state.session_cache = SessionCache.from_url(
        settings.REDIS_URL,
        password=settings.REDIS_PASSWORD,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        retry_interval=settings.REDIS_RETRY_INTERVAL,
    )
    app.state.session_cache.connect()
    logger.info("Account service started (environment=%s)", settings.ENVIRONMENT)
    yield
    app.state.session_cache.close()
    logger.info("Account service stopped")


app = FastAPI(
    title="StudyPath Account Service",
    description="Registration, authentication and session invalidation",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(health.router)


@app.exception_handler(DuplicateEmailError)
def duplicate_email_handler(request: Request, exc: DuplicateEmailError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": "Email already registered"})


@app.exception_handler(InvalidCredentialsError)
def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": "Invalid email or password"})


@app.exception_handler(InvalidTokenError)
def invalid_token_handler(request: Request, exc: InvalidTokenError):
    # Malformed, forged and expired tokens all look the same to the client
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": "Not authenticated"},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(HashingError)
def hashing_error_handler(request: Request, exc: HashingError):
    logger.error("Password hashing failed on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal server error"})


@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal server error"})
