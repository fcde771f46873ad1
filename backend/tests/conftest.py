import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from botocore.exceptions import ClientError, EndpointConnectionError
from httpx import ASGITransport, AsyncClient

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.config import get_settings
from app.services.storage import ObjectStoreGateway, StoreConfig


def _access_denied(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, operation)


class FakeS3Client:
    """In-memory stand-in for the subset of the boto3 S3 client the gateway uses."""

    def __init__(self) -> None:
        self.objects: dict[str, dict] = {}
        self.failing_operations: set[str] = set()
        self.failing_read_keys: set[str] = set()
        self.list_calls = 0
        self.omit_continuation_token = False
        self.extra_entries: list[dict] = []
        self.presign_calls: list[tuple[str, dict, int]] = []
        self._clock = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def put(self, key: str, size: int = 1024) -> None:
        self._clock += timedelta(seconds=1)
        self.objects[key] = {"Key": key, "Size": size, "LastModified": self._clock}

    def generate_presigned_url(self, ClientMethod, Params=None, ExpiresIn=3600, HttpMethod=None):
        params = Params or {}
        if ClientMethod in self.failing_operations:
            raise _access_denied(ClientMethod)
        if ClientMethod == "get_object" and params.get("Key") in self.failing_read_keys:
            raise _access_denied(ClientMethod)
        self.presign_calls.append((ClientMethod, params, ExpiresIn))
        verb = "PUT" if ClientMethod == "put_object" else "GET"
        return f"https://{params['Bucket']}.s3.example.com/{params['Key']}?verb={verb}&expires={ExpiresIn}"

    def list_objects_v2(self, Bucket, MaxKeys=1000, ContinuationToken=None):
        self.list_calls += 1
        if "list_objects_v2" in self.failing_operations:
            raise EndpointConnectionError(endpoint_url=f"https://{Bucket}.s3.example.com")
        keys = sorted(self.objects)
        start = int(ContinuationToken or 0)
        page = keys[start : start + MaxKeys]
        truncated = start + MaxKeys < len(keys)
        response: dict = {"Name": Bucket, "KeyCount": len(page), "IsTruncated": truncated}
        if page:
            response["Contents"] = [dict(self.objects[key]) for key in page]
        if self.extra_entries and start == 0:
            response.setdefault("Contents", []).extend(dict(entry) for entry in self.extra_entries)
        if truncated and not self.omit_continuation_token:
            response["NextContinuationToken"] = str(start + MaxKeys)
        return response

    def delete_object(self, Bucket, Key):
        if "delete_object" in self.failing_operations:
            raise _access_denied("DeleteObject")
        self.objects.pop(Key, None)
        return {"ResponseMetadata": {"HTTPStatusCode": 204}}


@pytest.fixture(scope="session", autouse=True)
def configure_environment():
    os.environ["ENV"] = "test"
    os.environ["DEBUG"] = "false"
    os.environ["AWS_REGION"] = "us-east-1"
    os.environ["AWS_BUCKET_NAME"] = "test-bucket"
    os.environ["AWS_ACCESS_KEY_ID"] = "test"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "test"
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def store_config() -> StoreConfig:
    return StoreConfig(bucket="test-bucket", region="us-east-1")


@pytest.fixture
def gateway(store_config, fake_s3) -> ObjectStoreGateway:
    return ObjectStoreGateway(store_config, client=fake_s3)


@pytest.fixture
def app_instance(configure_environment, gateway):
    from app.main import create_app

    app = create_app()
    # ASGITransport does not run lifespan events, so wire state directly
    app.state.gateway = gateway
    return app


@pytest_asyncio.fixture
async def client(app_instance):
    transport = ASGITransport(app=app_instance)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
