"""Application settings and configuration."""

from typing import Literal

from pydantic import Field, model_validator  # type: ignore
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    ENV: Literal["dev", "staging", "prod", "test"] = Field(default="dev")
    PROJECT_NAME: str = Field(default="Election Graph Gateway")

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=4000)

    # Neo4j
    NEO4J_URI: str = Field(default="bolt://localhost:7687")
    NEO4J_USERNAME: str = Field(default="neo4j")
    NEO4J_PASSWORD: str | None = Field(default=None)
    NEO4J_DATABASE: str | None = Field(default=None)  # None = server default database
    NEO4J_MAX_CONNECTION_POOL_SIZE: int = Field(default=50)
    NEO4J_MAX_CONNECTION_LIFETIME: int = Field(default=3600)  # seconds
    NEO4J_CONNECTION_ACQUISITION_TIMEOUT: float = Field(default=30.0)  # seconds

    # Per-request budget for a whole statement batch; 0 disables
    QUERY_TIMEOUT_SECONDS: float = Field(default=30.0, ge=0)

    # Request defaults
    DEFAULT_ELECTION_TYPE: str = Field(default="PRESIDENT")

    # CORS - Accept string or list, will be normalized to list
    CORS_ORIGINS: str | list[str] = Field(default="*")

    # Errors: pass driver messages through to clients (off in prod unless set)
    EXPOSE_ERROR_DETAILS: bool | None = Field(default=None)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    @model_validator(mode="before")
    @classmethod
    def parse_cors_origins(cls, data):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(data, dict) and "CORS_ORIGINS" in data:
            cors_origins = data["CORS_ORIGINS"]
            if isinstance(cors_origins, str):
                data["CORS_ORIGINS"] = [
                    origin.strip() for origin in cors_origins.split(",") if origin.strip()
                ]
        return data

    @model_validator(mode="after")
    def apply_environment_defaults(self):
        """Normalize derived settings and fail fast on unsafe production config."""
        if isinstance(self.CORS_ORIGINS, str):
            self.CORS_ORIGINS = [
                origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()
            ]
        if self.EXPOSE_ERROR_DETAILS is None:
            self.EXPOSE_ERROR_DETAILS = self.ENV != "prod"
        if self.ENV == "prod" and not self.NEO4J_PASSWORD:
            raise ValueError("NEO4J_PASSWORD must be set in production")
        return self

    @property
    def cors_allow_all(self) -> bool:
        return "*" in self.CORS_ORIGINS


# Global settings instance
settings = Settings()
