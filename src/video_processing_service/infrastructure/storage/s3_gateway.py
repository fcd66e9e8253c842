"""
Remote asset gateway over an S3-compatible object store.

Raw uploads are read from one bucket, renditions are written to another.
Works against AWS S3 and compatible services (Backblaze B2, MinIO, GCS
interoperability endpoint) through boto3.
"""

import mimetypes
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import boto3
from boto3.exceptions import Boto3Error
from boto3.s3.transfer import TransferConfig
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from video_processing_service.domain.exceptions import (
    ObjectNotFoundError,
    PublicAccessError,
    TransferError,
)
from video_processing_service.domain.models import PublishResult
from video_processing_service.shared.logging import get_logger

logger = get_logger(__name__)

_NOT_FOUND_CODES = ('404', 'NoSuchKey', 'NotFound')


def _is_not_found(error: ClientError) -> bool:
    return str(error.response.get('Error', {}).get('Code', '')) in _NOT_FOUND_CODES


class S3AssetGateway:
    """
    Fetches raw objects and publishes processed ones.
    Implements IAssetGateway protocol.

    No call is retried: a transient failure surfaces immediately as
    TransferError.
    """

    def __init__(
        self,
        raw_bucket: str,
        processed_bucket: str,
        endpoint: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        region: Optional[str] = None,
        public_base_url: Optional[str] = None,
        client=None
    ):
        """
        Initialize gateway.

        Args:
            raw_bucket: Bucket holding incoming raw videos
            processed_bucket: Bucket receiving published renditions
            endpoint: S3 endpoint URL (None for AWS)
            access_key: Access key (None to use the boto3 credential chain)
            secret_key: Secret key
            region: Optional region name
            public_base_url: Base URL of the processed bucket for public links
            client: Pre-built boto3 S3 client
        """
        self.raw_bucket = raw_bucket
        self.processed_bucket = processed_bucket
        self.endpoint = endpoint
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region
        self.public_base_url = public_base_url

        self._client = client or self._create_client()
        self._logger = get_logger(__name__)

        self._transfer_config = TransferConfig(
            multipart_threshold=50 * 1024 * 1024,  # 50MB
            multipart_chunksize=50 * 1024 * 1024,
            max_concurrency=4,
            use_threads=True
        )

    def _create_client(self):
        """Create S3 client; explicit keys are optional."""
        kwargs = {
            'config': Config(signature_version='s3v4'),
        }
        if self.endpoint:
            kwargs['endpoint_url'] = self.endpoint
        if self.access_key and self.secret_key:
            kwargs['aws_access_key_id'] = self.access_key
            kwargs['aws_secret_access_key'] = self.secret_key
        if self.region:
            kwargs['region_name'] = self.region

        return boto3.client('s3', **kwargs)

    def fetch(self, source_id: str, destination: Path) -> Path:
        """
        Download a raw object to a local path.

        Raises:
            ObjectNotFoundError: object does not exist in the raw bucket
            TransferError: any other failure
        """
        destination = Path(destination)
        location = f"s3://{self.raw_bucket}/{source_id}"
        self._logger.info(f"Downloading {location} -> {destination}")

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            self._client.download_file(self.raw_bucket, source_id, str(destination))
        except ClientError as e:
            if _is_not_found(e):
                raise ObjectNotFoundError(f"{location} not found") from e
            raise TransferError(f"Download of {location} failed: {e}") from e
        except (BotoCoreError, Boto3Error, OSError) as e:
            raise TransferError(f"Download of {location} failed: {e}") from e

        self._logger.info(f"{location} downloaded to {destination}")
        return destination

    def publish(self, local_path: Path, destination_id: str) -> PublishResult:
        """
        Upload a processed file and make it publicly readable.

        A failure in the make-public step leaves a private object behind; it
        is reported as TransferError and not rolled back.
        """
        local_path = Path(local_path)
        if not local_path.is_file():
            raise TransferError(f"File not found: {local_path}")

        size = local_path.stat().st_size
        location = f"s3://{self.processed_bucket}/{destination_id}"
        self._logger.info(f"Uploading {local_path} ({size} bytes) to {location}")

        extra_args = {}
        content_type, _ = mimetypes.guess_type(local_path.name)
        if content_type:
            extra_args['ContentType'] = content_type

        try:
            self._client.upload_file(
                str(local_path),
                self.processed_bucket,
                destination_id,
                ExtraArgs=extra_args or None,
                Config=self._transfer_config
            )
        except (ClientError, BotoCoreError, Boto3Error, OSError) as e:
            raise TransferError(f"Upload to {location} failed: {e}") from e

        try:
            self.make_public(destination_id)
        except PublicAccessError:
            self._logger.warning(f"{location} was uploaded but is not public")
            raise

        url = self.public_url(destination_id)
        self._logger.info(f"{local_path} uploaded to {location}")

        return PublishResult(
            object_id=destination_id,
            bucket=self.processed_bucket,
            url=url,
            size_bytes=size,
            public=True
        )

    def make_public(self, object_id: str) -> None:
        """Grant public read on a processed object."""
        try:
            self._client.put_object_acl(
                Bucket=self.processed_bucket,
                Key=object_id,
                ACL='public-read'
            )
        except (ClientError, BotoCoreError) as e:
            raise PublicAccessError(
                f"Making s3://{self.processed_bucket}/{object_id} public failed: {e}"
            ) from e

    def remove(self, object_id: str) -> None:
        """Delete a processed object. Deleting a missing key is not an error."""
        location = f"s3://{self.processed_bucket}/{object_id}"
        try:
            self._client.delete_object(Bucket=self.processed_bucket, Key=object_id)
        except (ClientError, BotoCoreError) as e:
            raise TransferError(f"Removing {location} failed: {e}") from e
        self._logger.info(f"Removed {location}")

    def public_url(self, object_id: str) -> str:
        """Anonymous URL of a published object."""
        key = quote(object_id)
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint:
            return f"{self.endpoint.rstrip('/')}/{self.processed_bucket}/{key}"
        return f"https://{self.processed_bucket}.s3.amazonaws.com/{key}"
