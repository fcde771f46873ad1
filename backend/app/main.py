import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routers import files as files_router
from app.api.routers import health as health_router
from app.core.config import get_settings
from app.core.logging import configure_logging
from app.services.storage import ObjectStoreGateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    store_config = settings.store_config()
    app.state.gateway = ObjectStoreGateway(store_config)
    logger.info(
        "Object store gateway ready (bucket=%s, region=%s)",
        store_config.bucket,
        store_config.region,
    )
    yield
    app.state.gateway = None


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(
        debug=settings.debug,
        title="Bucket Gallery API",
        lifespan=lifespan,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["GET", "POST", "DELETE"],
            allow_headers=["*"],
        )

    app.include_router(files_router.router)
    app.include_router(health_router.router)

    return app


app = create_app()
