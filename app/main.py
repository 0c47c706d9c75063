import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api_routers.v1 import api_router
from app.features.health.routes.health import router as health_router
from app.features.reports.services.axe import AxeService
from app.platform.config import settings
from app.platform.db.session import Database
from app.platform.exceptions import add_exception_handlers
from app.platform.logger import get_logger

# Configure logging to show INFO level messages
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the database client and shared axe loader for the process lifetime."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")

    database = Database(settings.DATABASE_URL)
    await database.connect()
    if settings.AUTO_CREATE_TABLES:
        await database.create_tables()

    app.state.database = database
    app.state.axe = AxeService.from_settings()

    yield

    await database.close()
    logger.info(f"Shutting down {settings.APP_NAME}")


app = FastAPI(
    title="A11y Audit AI API",
    description="Accessibility scanning, scoring and AI remediation guidance",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)


# Root endpoint for basic info
@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": "A11y Audit AI API",
        "description": "Automated accessibility audits with AI-generated fixes.",
        "version": settings.APP_VERSION,
        "docs_url": "/docs",
        "api_base": "/api/v1",
    }


origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(health_router)
app.include_router(api_router, prefix="/api/v1")
