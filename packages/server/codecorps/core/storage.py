"""
Image storage for user photos.

The changesets only depend on the ``ImageStore`` protocol. ``S3ImageStore``
puts objects in an S3-compatible bucket; ``LocalImageStore`` keeps files
under ``Settings.upload_dir``. Both use UUID-based names.
"""

from __future__ import annotations

import base64
import binascii
import io
import os
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import structlog
from minio import Minio
from minio.error import MinioException

from codecorps.core.config import Settings, get_settings

log = structlog.get_logger()

DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w-]+=[\w-]+)*;base64,(?P<payload>.*)$", re.S)

MIME_EXTENSIONS = {
    "image/gif": "gif",
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/webp": "webp",
}

EXTENSION_MIME_TYPES = {
    "gif": "image/gif",
    "png": "image/png",
    "jpg": "image/jpeg",
    "webp": "image/webp",
}

# Leading bytes of each supported image container
MAGIC_NUMBERS = (
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"\xff\xd8\xff", "jpg"),
)


class UploadError(Exception):
    """Raised by an image store when a file could not be stored."""


class InvalidImageData(ValueError):
    """Raised when base64 photo data cannot be decoded into a known image type."""


@dataclass(frozen=True)
class StoredFile:
    file_name: str
    path: str


@dataclass(frozen=True)
class DecodedImage:
    data: bytes
    extension: str


class ImageStore(Protocol):
    def upload(self, data: bytes, extension: str) -> StoredFile: ...

    def delete(self, file_name: str) -> None: ...


def sniff_extension(data: bytes) -> Optional[str]:
    for magic, ext in MAGIC_NUMBERS:
        if data.startswith(magic):
            return ext
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    return None


def decode_image_data(raw: str) -> DecodedImage:
    """Decode a ``data:image/...;base64,`` URI (or bare base64) into bytes.

    The extension comes from the declared mime type, or from the image's
    magic number when no mime type is given.
    """
    mime: Optional[str] = None
    payload = raw.strip()
    match = DATA_URI_RE.match(payload)
    if match:
        mime = match.group("mime")
        payload = match.group("payload")
    elif payload.startswith("data:"):
        raise InvalidImageData("unsupported data URI")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidImageData(str(exc)) from exc
    if not data:
        raise InvalidImageData("empty image")

    if mime is not None:
        extension = MIME_EXTENSIONS.get(mime.lower())
        if extension is None:
            raise InvalidImageData(f"unsupported image type {mime}")
    else:
        extension = sniff_extension(data)
        if extension is None:
            raise InvalidImageData("unrecognized image type")
    return DecodedImage(data=data, extension=extension)


def generate_file_name(extension: str) -> str:
    return f"{uuid.uuid4().hex}.{extension}"


def _check_size(data: bytes, max_bytes: Optional[int]) -> None:
    if max_bytes is not None and len(data) > max_bytes:
        raise UploadError(f"image exceeds {max_bytes} bytes")


class S3ImageStore:
    """Stores images as ``photos/<name>`` objects in an S3-compatible bucket."""

    def __init__(self, client: Minio, bucket: str, max_bytes: int | None = None):
        self.client = client
        self.bucket = bucket
        self.max_bytes = max_bytes

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3ImageStore":
        endpoint = settings.s3_endpoint
        client = Minio(
            endpoint.replace("http://", "").replace("https://", ""),
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
            secure=endpoint.startswith("https://"),
            region=settings.s3_region,
        )
        return cls(client, settings.s3_bucket, max_bytes=settings.photo_max_bytes)

    def ensure_bucket(self) -> None:
        try:
            if not self.client.bucket_exists(self.bucket):
                self.client.make_bucket(self.bucket)
        except MinioException as exc:
            raise UploadError(f"bucket {self.bucket} unavailable: {exc}") from exc

    def upload(self, data: bytes, extension: str) -> StoredFile:
        _check_size(data, self.max_bytes)

        file_name = generate_file_name(extension)
        object_name = f"photos/{file_name}"
        try:
            self.client.put_object(
                bucket_name=self.bucket,
                object_name=object_name,
                data=io.BytesIO(data),
                length=len(data),
                content_type=EXTENSION_MIME_TYPES.get(extension, "application/octet-stream"),
            )
        except MinioException as exc:
            raise UploadError(str(exc)) from exc

        log.info("photo.uploaded", file_name=file_name, size=len(data), bucket=self.bucket)
        return StoredFile(file_name=file_name, path=f"s3://{self.bucket}/{object_name}")

    def delete(self, file_name: str) -> None:
        try:
            self.client.remove_object(self.bucket, f"photos/{file_name}")
        except MinioException as exc:
            raise UploadError(str(exc)) from exc
        log.info("photo.deleted", file_name=file_name, bucket=self.bucket)


class LocalImageStore:
    """Stores images on the local filesystem under ``root/photos``.

    Used for development and tests; production deployments set
    ``CC_IMAGE_STORE=s3``.
    """

    def __init__(self, root: str | os.PathLike, max_bytes: int | None = None):
        self.root = Path(root)
        self.max_bytes = max_bytes

    def upload(self, data: bytes, extension: str) -> StoredFile:
        _check_size(data, self.max_bytes)

        directory = self.root / "photos"
        file_name = generate_file_name(extension)
        path = directory / file_name
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise UploadError(str(exc)) from exc

        log.info("photo.uploaded", file_name=file_name, size=len(data))
        return StoredFile(file_name=file_name, path=str(path))

    def delete(self, file_name: str) -> None:
        try:
            (self.root / "photos" / file_name).unlink(missing_ok=True)
        except OSError as exc:
            raise UploadError(str(exc)) from exc
        log.info("photo.deleted", file_name=file_name)


def get_image_store() -> ImageStore:
    """Image store configured from settings."""
    settings = get_settings()
    if settings.image_store == "s3":
        return S3ImageStore.from_settings(settings)
    return LocalImageStore(settings.upload_dir, max_bytes=settings.photo_max_bytes)
