import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from cliprelay.exceptions import TransportError
from cliprelay.schemas.enums import CloudProvider
from cliprelay.services.storage_config import StorageConfiguration, normalize_endpoint
import structlog

logger = structlog.get_logger()


def _error_message(error: Exception) -> str:
    if isinstance(error, ClientError):
        details = error.response.get("Error", {})
        return details.get("Message") or details.get("Code") or str(error)
    return str(error) or "Unknown upload error"


class R2Service:
    """Cloudflare R2 transport over the S3-compatible API."""

    def __init__(self, configuration: StorageConfiguration):
        self.s3_client = boto3.client(
            's3',
            endpoint_url=normalize_endpoint(configuration.endpoint),
            aws_access_key_id=configuration.access_key_id.strip(),
            aws_secret_access_key=configuration.secret_access_key.strip(),
            region_name="auto",
            config=Config(s3={"addressing_style": "path"})
        )

    def put_object(self, bucket: str, key: str, body: bytes, content_type: str) -> None:
        """
        Upload a buffer as a single object.

        Args:
            bucket: Destination bucket name
            key: Object key
            body: Object bytes
            content_type: MIME type stored with the object

        Raises:
            TransportError: With the transport's own message on any failure
        """
        try:
            self.s3_client.put_object(
                Bucket=bucket.strip(),
                Key=key,
                Body=body,
                ContentType=content_type
            )

            logger.info(
                "Uploaded object",
                bucket=bucket,
                key=key,
                content_type=content_type,
                size=len(body)
            )

        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to upload object",
                error=str(e),
                bucket=bucket,
                key=key
            )
            raise TransportError("Upload failed", _error_message(e), original_error=e)

    def head_bucket(self, bucket: str) -> None:
        """Check that the bucket exists and the credentials can reach it."""
        try:
            self.s3_client.head_bucket(Bucket=bucket.strip())
            logger.info("Bucket is reachable", bucket=bucket)

        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Bucket is not reachable",
                error=str(e),
                bucket=bucket
            )
            raise TransportError("Configuration failed", _error_message(e), original_error=e)


def build_transport(provider: CloudProvider, configuration: StorageConfiguration):
    """Select the transport for a provider tag."""
    if provider == CloudProvider.CLOUDFLARE_R2:
        return R2Service(configuration)
    raise TransportError("Upload failed", f"Unsupported cloud provider: {provider}")
