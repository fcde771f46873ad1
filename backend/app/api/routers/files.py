from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.api.deps import get_app_settings, get_gateway
from app.core.config import Settings
from app.schemas import (
    DeleteResult,
    ListObjectsResult,
    PresignRequest,
    UploadGrantResult,
    UploadLimits,
)
from app.services.storage import ObjectStoreGateway

router = APIRouter(prefix="/files", tags=["files"])


def _failure(result: BaseModel) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=result.model_dump(mode="json", exclude_none=True),
    )


@router.post("/presign", response_model=UploadGrantResult, response_model_exclude_none=True)
async def presign_upload(
    payload: PresignRequest,
    gateway: ObjectStoreGateway = Depends(get_gateway),
):
    result = await gateway.generate_upload_grant(payload.filename, payload.content_type)
    if not result.success:
        return _failure(result)
    return result


@router.get("/", response_model=ListObjectsResult, response_model_exclude_none=True)
async def list_files(gateway: ObjectStoreGateway = Depends(get_gateway)):
    result = await gateway.list_objects()
    if not result.success:
        return _failure(result)
    return result


@router.get("/limits", response_model=UploadLimits)
async def upload_limits(settings: Settings = Depends(get_app_settings)) -> UploadLimits:
    accepted = [item.strip() for item in settings.accepted_content_types.split(",") if item.strip()]
    return UploadLimits(max_upload_bytes=settings.max_upload_bytes, accepted_content_types=accepted)


@router.delete("/{key:path}", response_model=DeleteResult, response_model_exclude_none=True)
async def delete_file(key: str, gateway: ObjectStoreGateway = Depends(get_gateway)):
    result = await gateway.delete_object(key)
    if not result.success:
        return _failure(result)
    return result
