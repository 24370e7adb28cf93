"""
User Service - Main Application Entry Point
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from user_service.api import users
from user_service.api.errors import register_exception_handlers
from user_service.config import settings
from user_service.db import init_db, close_db
from user_service.version import __version__
import logging
import re

EMAIL_IN_TEXT = re.compile(r"\b([\w\-.])[\w\-.]*@([\w-]+\.)+[\w-]{2,4}\b")
# Digit runs with phone separators, not glued to words, times or decimals
PHONE_IN_TEXT = re.compile(r"(?<![\w:.+-])\+?\(?\d[\d\s\-()]{5,18}\d(?![\w:.])")
DATE_PREFIX = re.compile(r"\d{4}-\d{2}-\d{2}")


def _mask_phone(match: re.Match) -> str:
    candidate = match.group(0)
    digits = re.sub(r"[^0-9]", "", candidate)
    if DATE_PREFIX.match(candidate) or not 7 <= len(digits) <= 15:
        return candidate
    return f"***{digits[-2:]}"


# Custom logging filter to redact personal data
class SensitiveDataFilter(logging.Filter):
    """Mask email addresses and phone numbers in log messages"""

    def filter(self, record):
        if hasattr(record, 'msg'):
            msg = record.getMessage()

            # john.doe@example.com -> j***@example.com
            msg = EMAIL_IN_TEXT.sub(
                lambda m: f"{m.group(1)}***@{m.group(0).split('@', 1)[1]}", msg
            )

            # +1-555-123-4567 -> ***67; dates, times and UUIDs are left alone
            msg = PHONE_IN_TEXT.sub(_mask_phone, msg)

            record.msg = msg
            record.args = None
        return True


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Add filter to all root handlers
    for handler in logging.root.handlers:
        handler.addFilter(SensitiveDataFilter())


configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown"""
    logger.info("🚀 Starting User Service")
    logger.info(f"📦 Version: {__version__}")
    logger.info(f"📝 Environment: {settings.environment}")

    await init_db()

    yield

    logger.info("🛑 Stopping User Service")
    await close_db()


app = FastAPI(
    title="User Service",
    description="User account management: identity, contact, role, status and postal address",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)


# CORS is off unless CORS_ORIGINS lists origins (comma-separated)
allowed_origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]

if allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info(f"✅ CORS configured for origins: {allowed_origins}")

register_exception_handlers(app)

app.include_router(users.router, prefix="/api/v1", tags=["users"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "app": "User Service",
        "version": __version__,
        "status": "running",
        "environment": settings.environment,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
