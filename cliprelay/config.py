from pydantic_settings import BaseSettings
from typing import Optional, Union


class Settings(BaseSettings):
    database_url: str = "sqlite:///./cliprelay.db"
    environment: str = "development"
    log_level: str = "INFO"
    json_logs: bool = True

    class Config:
        env_file = ".env"
        extra = "ignore"


class Preferences(BaseSettings):
    """
    Flat user preferences read once per command invocation.

    Category toggles stay loosely typed on purpose: an absent value and an
    explicit "false" must remain distinguishable.
    """

    cloud_provider: Optional[str] = None

    endpoint: str = ""
    bucket: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    public_base_url: str = ""

    allow_images: Union[bool, str, None] = None
    allow_videos: Union[bool, str, None] = None
    allow_documents: Union[bool, str, None] = None
    allow_archives: Union[bool, str, None] = None
    allow_audios: Union[bool, str, None] = None
    allow_others: Union[bool, str, None] = None

    max_upload_size_mb: Optional[str] = None
    history_limit: Optional[str] = None

    class Config:
        env_prefix = "CLIPRELAY_"
        env_file = ".env"
        extra = "ignore"


def get_preferences() -> Preferences:
    """Build a fresh preferences snapshot; never cached between runs."""
    return Preferences()


settings = Settings()
