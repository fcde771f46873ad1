from datetime import datetime

from pydantic import BaseModel, Field


class PresignRequest(BaseModel):
    filename: str = Field(..., min_length=1)
    content_type: str = Field(default="application/octet-stream")


class UploadGrantResult(BaseModel):
    success: bool
    key: str | None = None
    upload_url: str | None = None
    error: str | None = None


class StoredObject(BaseModel):
    key: str
    file_name: str
    # str, not naming.Category: keys written by other tools keep their own prefix
    category: str
    last_modified: datetime | None = None
    size: int = 0
    url: str


class ListObjectsResult(BaseModel):
    success: bool
    files: list[StoredObject] = Field(default_factory=list)
    error: str | None = None


class DeleteResult(BaseModel):
    success: bool
    error: str | None = None


class UploadLimits(BaseModel):
    max_upload_bytes: int
    accepted_content_types: list[str]
