"""
Object Storage Service

Thin wrapper around boto3's S3 client.

Buckets:
- public: covers and avatars, served by plain URL
- private: book files, written by the client through presigned PUT URLs

The client is created once per process (see dependencies.get_object_store)
and replaced by an in-memory fake in tests.
"""

import logging
from typing import Protocol

import boto3

from digiread.config import Settings

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    """Storage operations the API needs."""

    def put(self, bucket: str, key: str, body: bytes, content_type: str | None = None) -> str:
        """Store an object and return its public URL."""
        ...

    def delete(self, bucket: str, key: str) -> None:
        ...

    def signed_upload_url(self, bucket: str, key: str, content_type: str) -> str:
        ...


class S3ObjectStore:
    """ObjectStore backed by S3 (or any S3-compatible endpoint)."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.client = boto3.client(
            "s3",
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key,
            aws_secret_access_key=settings.aws_secret_key,
            endpoint_url=settings.aws_endpoint_url,
        )

    def public_url(self, bucket: str, key: str) -> str:
        if self.settings.aws_endpoint_url:
            return f"{self.settings.aws_endpoint_url.rstrip('/')}/{bucket}/{key}"
        return f"https://{bucket}.s3.{self.settings.aws_region}.amazonaws.com/{key}"

    def put(self, bucket: str, key: str, body: bytes, content_type: str | None = None) -> str:
        params = {"Bucket": bucket, "Key": key, "Body": body}
        if content_type:
            params["ContentType"] = content_type
        self.client.put_object(**params)
        logger.info(f"Stored object {bucket}/{key}")
        return self.public_url(bucket, key)

    def delete(self, bucket: str, key: str) -> None:
        self.client.delete_object(Bucket=bucket, Key=key)
        logger.info(f"Deleted object {bucket}/{key}")

    def signed_upload_url(self, bucket: str, key: str, content_type: str) -> str:
        return self.client.generate_presigned_url(
            "put_object",
            Params={"Bucket": bucket, "Key": key, "ContentType": content_type},
            ExpiresIn=self.settings.signed_url_expire_seconds,
        )
