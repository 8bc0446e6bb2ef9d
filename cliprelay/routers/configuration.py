from fastapi import APIRouter, Depends, HTTPException
from cliprelay.dependencies import get_transport_factory
from cliprelay.exceptions import TransportError
from cliprelay.schemas.configuration import ConfigurationRequest, ConfigurationResponse
from cliprelay.services.admission import get_cloud_provider
from cliprelay.services.storage_config import mask_secret, normalize_configuration, validate_configuration
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/configuration", tags=["configuration"])


@router.post("/verify", response_model=ConfigurationResponse)
def verify_configuration(
    request: ConfigurationRequest,
    transport_factory=Depends(get_transport_factory)
):
    """
    Validate storage settings and check that the bucket is reachable.

    Args:
        request: Raw storage settings as entered by the user

    Returns:
        The normalized configuration with the secret masked
    """
    configuration = normalize_configuration({
        "endpoint": request.endpoint,
        "bucket": request.bucket,
        "access_key_id": request.accessKeyId,
        "secret_access_key": request.secretAccessKey,
        "public_base_url": request.publicBaseUrl,
    })
    errors = validate_configuration(configuration)
    if errors:
        raise HTTPException(status_code=400, detail=errors[0])

    provider = get_cloud_provider(request.cloudProvider)

    try:
        transport = transport_factory(provider, configuration)
        transport.head_bucket(configuration.bucket)
    except TransportError as e:
        raise HTTPException(status_code=502, detail=e.message)

    logger.info("Verified storage configuration", bucket=configuration.bucket, provider=provider.value)

    return ConfigurationResponse(
        endpoint=configuration.endpoint,
        bucket=configuration.bucket,
        accessKeyId=configuration.access_key_id,
        secretAccessKey=mask_secret(configuration.secret_access_key),
        publicBaseUrl=configuration.public_base_url,
        cloudProvider=provider.value
    )
