"""S3-compatible vault backend."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import StoreError, VaultObjectNotFound
from ..utils import gen_id
from .base import Vault

logger = logging.getLogger(__name__)


class S3Vault(Vault):
    """Vault stored in an S3 bucket.

    Works with AWS S3, MinIO and LocalStack through ``endpoint_url``.
    """

    def __init__(
        self,
        bucket: str,
        endpoint_url: Optional[str] = None,
        region: str = "us-east-1",
        client: Any = None,
    ) -> None:
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.region = region

        if client is None:
            client_kwargs = {
                "service_name": "s3",
                "region_name": region,
                "config": Config(signature_version="s3v4"),
            }
            if endpoint_url:
                client_kwargs["endpoint_url"] = endpoint_url
            client = boto3.client(**client_kwargs)
        self.client = client

        logger.debug(f"S3 vault initialized for bucket={bucket} endpoint={endpoint_url}")

    def _read(self, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            if e.response["Error"]["Code"] in ("NoSuchKey", "404"):
                raise VaultObjectNotFound(f"No object found for key: {key}", key=key)
            raise StoreError(f"S3 get_object failed for {key}: {e}") from e
        except BotoCoreError as e:
            raise StoreError(f"S3 get_object failed for {key}: {e}") from e

    def _write(self, key: str, data: bytes) -> None:
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"S3 put_object failed for {key}: {e}") from e

    async def fetch_utf8(self, key: str) -> str:
        data = await asyncio.to_thread(self._read, key)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StoreError(f"S3 file {key} is not valid utf8") from e

    async def save(self, content: str | bytes, key: Optional[str] = None) -> str:
        key = key or gen_id()
        data = content.encode("utf-8") if isinstance(content, str) else content
        await asyncio.to_thread(self._write, key, data)
        logger.info(f"Saved vault object {key} to bucket {self.bucket}")
        return key
