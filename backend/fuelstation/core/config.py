from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central application configuration."""

    PROJECT_NAME: str = "Fuel Station Back Office"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = Field(default="local", validation_alias="ENV", description="Deployment environment")

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./fuelstation.db")

    # HTTP
    PORT: int = Field(default=4000)
    FRONTEND_URL: str = Field(default="*", description="Comma separated list of allowed CORS origins")

    # Business rules
    MAX_BULK_READINGS: int = Field(default=50)
    DEFAULT_MARGIN_FRACTION: float = Field(default=0.10)
    BALANCE_EPSILON: float = Field(default=0.01)

    # Observability
    LOG_LEVEL: str = Field(default="INFO")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def cors_origins(self) -> List[str]:
        origins = [origin.strip() for origin in self.FRONTEND_URL.split(",")]
        return [origin for origin in origins if origin] or ["*"]


settings = Settings()
