"""Self-managed bucket backend using boto3 put_object."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import boto3
import pytz
from botocore.exceptions import BotoCoreError, ClientError

from icalshare.config.constants import BACKEND_S3, ICS_MIME_TYPE, UPLOADER_NAME
from icalshare.exceptions.errors import UploadError
from icalshare.publish.base import PublishResult

logger = logging.getLogger(__name__)


def object_key(identifier: str) -> str:
    """Bucket key for a publish identifier."""
    return identifier if identifier.endswith(".ics") else f"{identifier}.ics"


class S3Publisher:
    """Publishes files to an S3-compatible bucket.

    put_object on an existing key replaces it, so no delete is needed.
    """

    def __init__(
        self,
        bucket: str,
        public_base_url: str,
        client: Optional[Any] = None,
        endpoint_url: Optional[str] = None,
        uploader: str = UPLOADER_NAME,
    ):
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self.uploader = uploader
        self.client = client or boto3.client("s3", endpoint_url=endpoint_url)

    def public_url(self, identifier: str) -> str:
        return f"{self.public_base_url}/{object_key(identifier)}"

    def publish(self, path: Union[str, Path], identifier: str) -> PublishResult:
        """Upload ``path`` to ``{identifier}.ics`` with public-read access.

        Raises:
            UploadError: If the file cannot be read or the bucket call fails.
        """
        path = Path(path)
        key = object_key(identifier)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise UploadError(f"Could not read {path}", str(e)) from e

        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=ICS_MIME_TYPE,
                ContentDisposition="inline",
                ACL="public-read",
                Metadata={
                    "uploaded-by": self.uploader,
                    "uploaded-at": datetime.now(pytz.utc).isoformat(),
                },
            )
        except (BotoCoreError, ClientError) as e:
            raise UploadError(f"Failed to upload to s3://{self.bucket}/{key}", str(e)) from e

        url = self.public_url(identifier)
        logger.info("Published %s as %s", path.name, url)
        return PublishResult(url=url, key=key, backend=BACKEND_S3)
