import json
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Route Alternatives API"
    VERSION: str = "0.1.0"
    API_V1_STR: str = "/api/v1"

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    OSRM_BASE_URL: str = "https://router.project-osrm.org"
    OSRM_PROFILE: str = "driving"
    SNAP_TIMEOUT_SECONDS: float = 4.0
    ROUTE_TIMEOUT_SECONDS: float = 12.0

    MAX_ALTERNATIVES: int = 5
    VIA_OFFSET_CAP_DEG: float = 0.03
    DISPLACEMENT_DEG: float = 0.01

    MARKER_SPACING_M: float = 100.0
    MAX_MARKERS: int = 400

    TIMEZONE: str = "Europe/Moscow"

    LLM_PROVIDER: str = "anthropic"
    LLM_MODEL: str = "claude-sonnet-4-20250514"
    LLM_MAX_TOKENS: int = 1200
    LLM_TIMEOUT_SECONDS: float = 30.0
    ANTHROPIC_API_KEY: str | None = None
    OPENAI_API_KEY: str | None = None

    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["http://localhost:8081", "http://localhost:19006"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)


settings = Settings()
