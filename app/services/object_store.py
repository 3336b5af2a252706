"""
Object storage boundary: put + head against S3 (or an S3-compatible endpoint).
The upload pipeline only depends on the ObjectStore protocol; tests swap in an in-memory store.
"""
import logging
from typing import BinaryIO, Protocol
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import Settings

logger = logging.getLogger(__name__)

ACL_PUBLIC_READ = "public-read"


class ObjectStoreError(Exception):
    """A put or head request against the object store failed."""


class ObjectStore(Protocol):
    def put_object(self, bucket: str, key: str, body: BinaryIO, content_type: str, acl: str) -> None: ...

    def head_object(self, bucket: str, key: str) -> dict: ...


class S3ObjectStore:
    def __init__(self, settings: Settings, client=None):
        if client is None:
            kwargs = {"region_name": settings.s3_region}
            if settings.s3_endpoint_url:
                kwargs["endpoint_url"] = settings.s3_endpoint_url
            if settings.aws_access_key_id and settings.aws_secret_access_key:
                kwargs["aws_access_key_id"] = settings.aws_access_key_id
                kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
            client = boto3.client("s3", **kwargs)
        self._s3 = client

    def put_object(self, bucket: str, key: str, body: BinaryIO, content_type: str, acl: str) -> None:
        try:
            self._s3.put_object(Bucket=bucket, Key=key, Body=body, ContentType=content_type, ACL=acl)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"put s3://{bucket}/{key} failed: {e}") from e
        logger.info("Uploaded s3://%s/%s (%s)", bucket, key, content_type)

    def head_object(self, bucket: str, key: str) -> dict:
        try:
            return self._s3.head_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"head s3://{bucket}/{key} failed: {e}") from e


def public_object_url(settings: Settings, key: str) -> str:
    """Public URL for key: PUBLIC_BASE_URL if set, otherwise the bucket's virtual-hosted S3 URL."""
    base = settings.public_base_url.rstrip("/")
    if base:
        return f"{base}/{quote(key)}"
    host = f"s3.{settings.s3_region}.amazonaws.com"
    if settings.s3_region == "us-east-1":
        host = "s3.amazonaws.com"
    return f"https://{settings.s3_bucket}.{host}/{quote(key)}"
