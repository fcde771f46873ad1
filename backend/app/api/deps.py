from fastapi import HTTPException, Request, status

from app.core.config import Settings, get_settings
from app.services.storage import ObjectStoreGateway


def get_gateway(request: Request) -> ObjectStoreGateway:
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Object store gateway not initialised",
        )
    return gateway


def get_app_settings() -> Settings:
    return get_settings()
