import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ...core.config import settings
from ...exceptions import StorageError
from ...application.ports.storage_repo import ObjectStorage, StoredObject

logger = logging.getLogger(__name__)


class S3ObjectStorage(ObjectStorage):
    def __init__(self, bucket: Optional[str] = None, region: Optional[str] = None, endpoint_url: Optional[str] = None, client=None) -> None:
        self.bucket = bucket or settings.S3_BUCKET
        self.region = region or settings.S3_REGION
        self.endpoint_url = endpoint_url or settings.S3_ENDPOINT_URL

        if not self.bucket:
            raise RuntimeError(
                "Invalid configuration: storage backend is set to s3, but S3_BUCKET is unset"
            )

        self.client = client or boto3.client(
            "s3", region_name=self.region, endpoint_url=self.endpoint_url
        )

    def url_for(self, key: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def upload(self, data: bytes, folder: str, public_id: str, content_type: str) -> StoredObject:
        key = f"{folder}/{public_id}" if folder else public_id
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"S3 upload failed for {key}: {e}") from e
        logger.info(f"Uploaded {len(data)} bytes to s3://{self.bucket}/{key}")
        return StoredObject(url=self.url_for(key), storage_key=key)

    def delete(self, storage_key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=storage_key)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"S3 delete failed for {storage_key}: {e}") from e
