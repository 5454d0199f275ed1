"""Environment-driven configuration with Pydantic v2."""

from typing import List, Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings driven entirely by environment variables."""

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3010, ge=1024, le=65535)
    debug: bool = Field(default=False)

    # Sessions
    session_secret_key: str = Field(min_length=32)
    session_expire_minutes: int = Field(default=10080, ge=5)  # 7 days
    session_cookie_name: str = Field(default="gameshelf_session")
    session_cookie_secure: bool = Field(default=False)  # True in production
    session_cookie_samesite: Literal["lax", "strict", "none"] = Field(default="lax")

    # Security
    cors_origins: List[str] = Field(default=["http://localhost:5173"])

    # Upstream catalog (RAWG)
    rawg_api_url: str = Field(default="https://api.rawg.io/api")
    rawg_api_key: str = Field(default="")
    upstream_timeout: float = Field(default=10.0, ge=1.0, le=120.0)

    # Cache
    cache_sweep_interval: int = Field(default=3600, ge=1)
    cache_single_flight: bool = Field(default=True)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    log_file: Optional[str] = Field(default=None)

    @field_validator("rawg_api_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.debug

    @property
    def is_production(self) -> bool:
        return not self.debug

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "env_parse_none_str": "none",
    }
