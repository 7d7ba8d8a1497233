"""Object storage for card images. Any S3 compatible bucket (R2, MinIO, AWS)."""

import logging
import time
import uuid

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Depends

from flocka.config import Config, get_config
from flocka.errors.card import ImageInvalid, ImageNotFound

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE = 10 * 1024 * 1024
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": {"jpg", "jpeg"},
    "image/jpg": {"jpg", "jpeg"},
    "image/png": {"png"},
    "image/gif": {"gif"},
    "image/webp": {"webp"},
}
IMAGE_KEY_PREFIX = "cards/"
# seconds a presigned upload url stays valid
UPLOAD_URL_TTL = 3600


def validate_image(file_name: str, content_type: str, size: int) -> str:
    """Return the normalized file extension, raise ImageInvalid otherwise."""
    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    if size <= 0 or size > MAX_IMAGE_SIZE:
        raise ImageInvalid(f"size={size}")
    allowed_extensions = ALLOWED_IMAGE_TYPES.get(content_type)
    if allowed_extensions is None or extension not in allowed_extensions:
        raise ImageInvalid(f"{content_type=} {extension=}")
    return extension


def generate_image_key(user_id: str, extension: str) -> str:
    return f"{IMAGE_KEY_PREFIX}{user_id}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.{extension}"


class ObjectStorageService:
    def __init__(self, config: Config):
        self.config = config
        self.bucket = config.s3_bucket
        self._client = None

    @property
    def client(self):
        # created on first use so requests that never touch images stay cheap
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.config.s3_endpoint_url,
                aws_access_key_id=self.config.s3_access_key_id,
                aws_secret_access_key=self.config.s3_secret_access_key,
                # R2 only accepts SigV4, presigned urls included
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            CacheControl="public, max-age=31536000",
        )
        logger.info("Stored object key=%s size=%d", key, len(data))

    def get(self, key: str) -> tuple[bytes, str]:
        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise ImageNotFound(key)
            raise
        return obj["Body"].read(), obj.get("ContentType", "application/octet-stream")

    def presigned_put_url(
        self, key: str, content_type: str, expires_in: int = UPLOAD_URL_TTL
    ) -> str:
        """URL a client can PUT the image bytes to without going through the API."""
        return self.client.generate_presigned_url(
            "put_object",
            Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
            ExpiresIn=expires_in,
        )

    def delete(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=key)
        logger.info("Deleted object key=%s", key)

    def delete_quietly(self, key: str) -> None:
        """Delete an image whose database row is already gone, failures are logged."""
        try:
            self.delete(key)
        except (BotoCoreError, ClientError) as exc:
            logger.warning("Failed to delete object key=%s: %s", key, exc)


def get_object_storage(config: Config = Depends(get_config)) -> ObjectStorageService:
    return ObjectStorageService(config)
