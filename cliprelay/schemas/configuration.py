from pydantic import BaseModel
from typing import Optional


class ConfigurationRequest(BaseModel):
    endpoint: Optional[str] = None
    bucket: Optional[str] = None
    accessKeyId: Optional[str] = None
    secretAccessKey: Optional[str] = None
    publicBaseUrl: Optional[str] = None
    cloudProvider: Optional[str] = None


class ConfigurationResponse(BaseModel):
    endpoint: str
    bucket: str
    accessKeyId: str
    secretAccessKey: str  # masked
    publicBaseUrl: str
    cloudProvider: str
    status: str = "verified"
