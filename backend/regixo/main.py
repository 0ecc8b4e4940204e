from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import uvicorn
from sqlalchemy import text

from regixo.api.routes import find_ticket, health, organizer, public_registrations, register, verify
from regixo.core.config import settings
from regixo.core.exceptions import register_exception_handlers
from regixo.core.logging import setup_logging
from regixo.db.base import Base
from regixo.db.session import SessionLocal, engine
import regixo.models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for startup and shutdown"""
    setup_logging()
    logger.info("🚀 Starting Regixo registration service...")

    logger.info("📦 Creating database tables...")
    Base.metadata.create_all(bind=engine)

    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        db.close()
        logger.info("✅ Database connection successful")
    except Exception as e:
        logger.error(f"❌ Database connection failed: {e}")
        raise

    yield

    logger.info("👋 Shutting down...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Event registration intake, ticket lookup and organizer review",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health.router, prefix=settings.API_PREFIX, tags=["Health"])
app.include_router(register.router, prefix=settings.API_PREFIX, tags=["Registration"])
app.include_router(find_ticket.router, prefix=settings.API_PREFIX, tags=["Lookup"])
app.include_router(verify.router, prefix=settings.API_PREFIX, tags=["Lookup"])
app.include_router(public_registrations.router, prefix=settings.API_PREFIX, tags=["Lookup"])
app.include_router(organizer.router, prefix=f"{settings.API_PREFIX}/organizer", tags=["Organizer"])


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "operational",
        "docs": "/docs",
        "endpoints": {
            "health": "/api/health",
            "register": "/api/register",
            "find_ticket": "/api/find-ticket",
            "verify_registration": "/api/verify-registration",
            "public_registrations": "/api/public-registrations",
            "organizer": "/api/organizer"
        },
        "privacy_note": "Lookups never return unmasked contact data to anonymous callers"
    }


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000, reload=False)
