from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

from ..core.world_generator import WorldConfig

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    # Database Configuration
    db_host: str = Field(default="localhost", description="Database host")
    db_port: int = Field(default=5432, description="Database port")
    db_name: str = Field(default="py_territory", description="Database name")
    db_user: str = Field(default="postgres", description="Database user")
    db_password: str = Field(default="password", description="Database password")
    database_url_override: Optional[str] = Field(
        default=None,
        validation_alias="DATABASE_URL",
        description="Full database URL, takes precedence over the db_* parts",
    )

    @property
    def database_url(self) -> str:
        """Construct full database URL."""
        if self.database_url_override:
            return self.database_url_override
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8080, description="API port")
    debug: bool = Field(default=False, description="Enable debug mode (SQL echo)")
    allowed_origins: str = Field(default="*", description="CORS allowed origins, comma separated")

    # Admin Configuration
    admin_reset_key: Optional[str] = Field(
        default=None, description="Shared key required by the world reset endpoint"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (json or console)")

    # World Generation Configuration
    world_width: int = Field(default=200, gt=0, description="World width in tiles")
    world_height: int = Field(default=120, gt=0, description="World height in tiles")
    world_seed: int = Field(default=1337, description="Seed for every generation hash")
    batch_size: int = Field(default=2000, gt=0, description="Rows per bulk insert")
    init_on_boot: bool = Field(default=False, description="Generate the world on API startup")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def origins(self) -> list:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    def world_config(self) -> WorldConfig:
        """Build the explicit world configuration passed into generation."""
        return WorldConfig(
            width=self.world_width, height=self.world_height, seed=self.world_seed
        )


# Instantiate singleton settings object
settings = Settings()
