"""Publishing backends for the exported calendar."""

from icalshare.config.constants import BACKEND_S3
from icalshare.config.settings import ExportConfig
from icalshare.publish.base import Publisher, PublishResult
from icalshare.publish.uploadthing import UploadThingPublisher


def create_publisher(config: ExportConfig) -> Publisher:
    """Build the backend selected in ``config``.

    Expects ``config.validate_publish()`` to have passed.
    """
    if config.backend == BACKEND_S3:
        from icalshare.publish.s3 import S3Publisher

        return S3Publisher(
            bucket=config.s3_bucket,
            public_base_url=config.s3_public_base_url,
            endpoint_url=config.s3_endpoint_url,
        )
    return UploadThingPublisher(
        token=config.uploadthing_token,
        app_id=config.uploadthing_app_id,
    )


__all__ = [
    "Publisher",
    "PublishResult",
    "UploadThingPublisher",
    "create_publisher",
]
