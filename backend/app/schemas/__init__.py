from app.schemas.storage import (
    DeleteResult,
    ListObjectsResult,
    PresignRequest,
    StoredObject,
    UploadGrantResult,
    UploadLimits,
)

__all__ = [
    "PresignRequest",
    "UploadGrantResult",
    "StoredObject",
    "ListObjectsResult",
    "DeleteResult",
    "UploadLimits",
]
