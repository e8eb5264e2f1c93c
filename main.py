from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
import logging
import uvicorn

from config.settings import settings
from core.database import engine, Base
from core.error_handlers import register_exception_handlers
from core.exceptions import ServiceUnavailable
from core.logging import setup_logging
from api.middleware.store import get_item_store
from api.routes import inventory
from modules.inventory.service import ItemStore

# Import models to ensure they are registered with SQLAlchemy
from modules.inventory.models import InventoryItem

setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"🚀 Starting {settings.PROJECT_NAME} v{settings.VERSION}")

    logger.info("📁 Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info(f"✅ Table '{InventoryItem.__tablename__}' ready")

    yield

    # Shutdown
    logger.info(f"👋 Shutting down {settings.PROJECT_NAME}...")
    engine.dispose()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Barcode inventory lookup service",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
)

register_exception_handlers(app)

# Include routers
app.include_router(inventory.router, prefix=settings.API_PREFIX, tags=["inventory"])

@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME} v{settings.VERSION}",
        "status": "running",
        "docs": "/docs"
    }

@app.get("/health")
async def health_check(store: ItemStore = Depends(get_item_store)):
    try:
        store.ping()
    except SQLAlchemyError as e:
        logger.error(f"Connection verification failed: {e}")
        raise ServiceUnavailable("Database connection is not active")

    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "database": "connected"
    }

@app.get("/config")
async def get_config():
    """Get application configuration (safe version without secrets)"""
    return settings.to_dict()

@app.get("/api")
async def api_info():
    """API information endpoint"""
    endpoint = f"{settings.API_PREFIX}/inventory"
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "endpoint": endpoint,
        "actions": {
            action: f"{verb} {endpoint}?action={action}"
            for action, (verb, _) in inventory.ACTIONS.items()
        },
        "documentation": "/docs"
    }

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )
