from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.services.storage import StoreConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        protected_namespaces=(),
    )

    env: Literal["local", "prod", "test"] = Field(default="local", alias="ENV")
    debug: bool = Field(default=True, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    aws_region: str | None = Field(default=None, alias="AWS_REGION")
    aws_bucket_name: str | None = Field(default=None, alias="AWS_BUCKET_NAME")
    s3_endpoint: HttpUrl | None = Field(default=None, alias="S3_ENDPOINT_URL")
    # Left unset, boto3 resolves credentials through its default chain.
    aws_access_key_id: str | None = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str | None = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")

    upload_url_ttl: int = Field(default=3600, alias="UPLOAD_URL_TTL", gt=0)
    read_url_ttl: int = Field(default=900, alias="READ_URL_TTL", gt=0)
    list_page_size: int = Field(default=1000, alias="LIST_PAGE_SIZE", gt=0, le=1000)

    max_upload_bytes: int = Field(default=100 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    accepted_content_types: str = Field(default="image/*,video/*", alias="ACCEPTED_CONTENT_TYPES")

    cors_origins: list[str] = Field(default_factory=list, alias="CORS_ORIGINS")

    def store_config(self) -> StoreConfig:
        return StoreConfig(
            bucket=self.aws_bucket_name,
            region=self.aws_region,
            endpoint_url=str(self.s3_endpoint) if self.s3_endpoint else None,
            access_key_id=self.aws_access_key_id,
            secret_access_key=self.aws_secret_access_key,
            upload_url_ttl=self.upload_url_ttl,
            read_url_ttl=self.read_url_ttl,
            list_page_size=self.list_page_size,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
