import secrets
import time
from pathlib import PurePosixPath
from typing import Literal, NamedTuple

Category = Literal["images", "videos", "other"]

CATEGORIES: tuple[Category, ...] = ("images", "videos", "other")


class KeyParts(NamedTuple):
    category: str
    file_name: str
    extension: str


def categorize(content_type: str | None) -> Category:
    content_type = content_type or ""
    if content_type.startswith("image/"):
        return "images"
    if content_type.startswith("video/"):
        return "videos"
    return "other"


def extension_of(original_name: str) -> str:
    # Browsers on Windows may submit "C:\\fakepath\\name.ext".
    name = PurePosixPath(original_name.replace("\\", "/")).name
    _, dot, extension = name.rpartition(".")
    if not dot:
        return ""
    return extension


def make_key(original_name: str, content_type: str | None) -> str:
    """Build a collision-resistant storage key for an upload.

    Layout is ``{category}/{unix_millis}-{16 hex chars}[.{extension}]``.
    The random part carries 64 bits from the OS CSPRNG, so no lookup
    against the bucket is needed to keep keys unique.
    """
    category = categorize(content_type)
    timestamp = time.time_ns() // 1_000_000
    token = secrets.token_hex(8)
    extension = extension_of(original_name)
    suffix = f".{extension}" if extension else ""
    return f"{category}/{timestamp}-{token}{suffix}"


def parse_key(key: str) -> KeyParts:
    category = key.split("/", 1)[0]
    file_name = key.rsplit("/", 1)[-1]
    _, dot, extension = file_name.rpartition(".")
    return KeyParts(category=category, file_name=file_name, extension=extension if dot else "")
