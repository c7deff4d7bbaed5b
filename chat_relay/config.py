# Configuration for the OpenAI-compatible relay

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings loaded from environment variables (and a local .env file, if any).
    Built once at startup and passed explicitly to the app and its collaborators.
    """
    model_config = SettingsConfigDict(
        case_sensitive=True,
        extra="ignore",
        env_file=".env",
    )

    # Upstream chat service
    AI_URL: str = Field(..., description="Upstream endpoint receiving the translated payload", alias="AI_URL")
    UPSTREAM_TIMEOUT: Optional[float] = Field(None, description="Total upstream timeout in seconds; unset waits forever", alias="UPSTREAM_TIMEOUT")
    UPSTREAM_USER_ID: Optional[str] = Field(None, description="Value of the 'userid' header sent upstream", alias="UPSTREAM_USER_ID")

    # Listen address
    HOST: str = Field("0.0.0.0", alias="HOST")
    PORT: int = Field(3000, alias="PORT")

    # Model ids
    DEFAULT_MODEL: str = Field("gpt-5", description="Model used when the caller omits one", alias="DEFAULT_MODEL")
    PUBLIC_MODEL_ID: str = Field("gpt-5", description="Model id reported by /v1/models", alias="PUBLIC_MODEL_ID")

    # Synthetic streaming
    STREAM_CHUNK_SIZE: int = Field(500, gt=0, description="Characters per content chunk", alias="STREAM_CHUNK_SIZE")

    # Reported to upstream as environment.working_directory
    WORKING_DIRECTORY: str = Field(default_factory=os.getcwd, alias="WORKING_DIRECTORY")

    # Logging
    LOG_REQUEST_BODY_MAX_LENGTH: int = Field(5000, alias="LOG_REQUEST_BODY_MAX_LENGTH")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
