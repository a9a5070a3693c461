"""Application configuration using Pydantic settings."""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, PostgresDsn, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Structure Treasury"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = Field(default="INFO")

    # Database
    postgres_host: str = Field(default="localhost")
    postgres_port: int = Field(default=5432)
    postgres_user: str = Field(default="structure_treasury")
    postgres_password: str = Field(default="structure_treasury")
    postgres_db: str = Field(default="structure_treasury")
    database_url: str | None = Field(default=None, validate_default=True)

    @field_validator("database_url", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: str | None, values) -> str:
        """Build database URL from components if not provided."""
        if isinstance(v, str):
            return v

        data = values.data if hasattr(values, 'data') else {}
        return PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=data.get("postgres_user", "structure_treasury"),
            password=data.get("postgres_password", "structure_treasury"),
            host=data.get("postgres_host", "localhost"),
            port=data.get("postgres_port", 5432),
            path=data.get("postgres_db", "structure_treasury"),
        ).unicode_string()

    # Structure assembly and activation gates
    assembly_cost_per_leg: Decimal = Field(default=Decimal("2.50"), description="Fixed cost per leg")
    cash_tolerance: Decimal = Field(default=Decimal("1000"), description="Allowed negative balance after activation")
    guarantee_tolerance: Decimal = Field(default=Decimal("5000"), description="Allowed guarantee shortfall")

    # Margin and guarantee defaults (percent)
    default_option_margin_percent: Decimal = Field(default=Decimal("15"))
    default_stock_margin_percent: Decimal = Field(default=Decimal("100"))
    default_stock_guarantee_percent: Decimal = Field(default=Decimal("60"))

    # API Settings
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_reload: bool = Field(default=True)
    user_header: str = Field(default="X-User-Id", description="Header carrying the authenticated user id")

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"]
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
