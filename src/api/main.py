"""FastAPI application entry point."""

import logging
import sys
import time
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from dotenv import load_dotenv

# Load environment variables from .env file
# Must be called before load_settings() reads them
load_dotenv()

# Add src to path
# main.py is at /app/src/api/main.py
# src is at /app/src, so we go up 2 levels
_src_path = Path(__file__).parent.parent
sys.path.insert(0, str(_src_path))

from adapter.hashing.credential_verifier import BcryptCredentialVerifier
from adapter.memory.user_repository import InMemoryUserRepository
from api.routes import cake, health, users
from port.credential_verifier import CredentialVerifier
from port.user_repository import UserRepository
from services.token_service import TokenService
from utils.config import Settings, load_settings
from utils.logging import setup_structured_logging

logger = logging.getLogger(__name__)

# Read version from pyproject.toml (single source of truth)
_project_root = _src_path.parent
with open(_project_root / "pyproject.toml", "rb") as f:
    VERSION = tomllib.load(f)["project"]["version"]

SERVICE_NAME = "Cake Identity API"


def create_app(
    settings: Settings | None = None,
    user_repo: UserRepository | None = None,
    token_service: TokenService | None = None,
    credential_verifier: CredentialVerifier | None = None,
) -> FastAPI:
    """Build the application around explicitly owned collaborators.

    A token_service that is not passed in is loaded from the configured key
    files during startup; KeyLoadError aborts startup before any request is
    served.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.token_service is None:
            app.state.token_service = TokenService.from_files(
                settings.public_key_path,
                settings.private_key_path,
                ttl=settings.jwt_expiration,
            )
        logger.info("Service started", extra={"service": SERVICE_NAME, "version": VERSION})
        yield  # App runs here
        logger.info("Service stopped", extra={"service": SERVICE_NAME})

    app = FastAPI(
        title=SERVICE_NAME,
        description="Minimal identity service: registration, RS256 JWT login and profile changes",
        version=VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.user_repo = user_repo if user_repo is not None else InMemoryUserRepository()
    app.state.token_service = token_service
    app.state.credential_verifier = (
        credential_verifier if credential_verifier is not None
        else BcryptCredentialVerifier(rounds=settings.bcrypt_rounds)
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()

        def log_request(status_code: int):
            logger.info(
                "Request handled",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": status_code,
                    "durationMs": round((time.perf_counter() - started) * 1000, 2),
                },
            )

        try:
            response = await call_next(request)
        except Exception:
            # ServerErrorMiddleware has already answered 500 and re-raises
            log_request(500)
            raise
        log_request(response.status_code)
        return response

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        logger.info("Invalid request body", extra={"path": request.url.path, "errors": len(exc.errors())})
        return PlainTextResponse("invalid request body", status_code=422)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": request.url.path})
        return PlainTextResponse("internal server error", status_code=500)

    # Register routes
    app.include_router(users.router)
    app.include_router(cake.router)
    app.include_router(health.router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": SERVICE_NAME,
            "version": VERSION,
            "status": "running"
        }

    return app


if __name__ == "__main__":
    import uvicorn

    setup_structured_logging()
    settings = load_settings()
    # uvicorn handles SIGINT/SIGTERM and drains in-flight requests
    uvicorn.run(
        create_app(settings),
        host="0.0.0.0",
        port=settings.port,
        access_log=False  # Request lines come from log_requests
    )
