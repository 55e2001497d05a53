# Standard library imports
from pathlib import Path
from contextlib import asynccontextmanager
import logging

# External package imports
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Local application imports
from .api.v1 import device_router, register_exception_handlers
from .core.config import get_settings
from .di.container import get_container
from .domain.repositories.device_repository import DeviceRepository
from .domain.results import StorageFaultError
from .infrastructure.db.mongo_connection import close_mongo_connection
from .infrastructure.db.mongo_device_repository import MongoDeviceRepository

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.

    Builds the dependency container, makes sure the MongoDB indexes exist
    when the Mongo backend is configured, and closes the client on shutdown.
    """
    container = get_container()
    device_repository = container.get(DeviceRepository)
    logger.info(f"Device store backend: {container.settings.device_store_backend}")

    if isinstance(device_repository, MongoDeviceRepository):
        try:
            await device_repository.ensure_indexes()
            logger.info("MongoDB device indexes ensured")
        except StorageFaultError as e:
            # Requests will surface the fault themselves; don't block startup
            logger.error(f"Failed to ensure MongoDB indexes: {e.message}", exc_info=True)

    yield

    close_mongo_connection()
    logger.info("Application shutdown complete")


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("device_api").setLevel(level)


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    This function sets up the FastAPI application with:
    - Environment variable loading
    - Logging configuration
    - CORS middleware configuration
    - Error handlers and API route registration

    Returns:
        Configured FastAPI application instance
    """
    # Load environment variables from .env file
    env_path = Path(__file__).resolve().parent.parent / ".env"
    load_dotenv(env_path)

    settings = get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(
        title="Device API",
        version="1.0.0",
        description="Device registry with lifecycle rules and optimistic concurrency",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials="*" not in settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "Location", "Retry-After"],
    )

    register_exception_handlers(application)
    application.include_router(device_router, prefix="/api/v1/devices")

    return application


# Create application instance
app = create_application()
