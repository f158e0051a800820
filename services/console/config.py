import os
import logging
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Optional

logger = logging.getLogger(__name__)


def get_port_from_env() -> int:
    """
    Get port from environment.

    Priority: PORT > CONSOLE_PORT > default 8080
    """
    port_str = os.environ.get("PORT") or os.environ.get("CONSOLE_PORT") or "8080"
    try:
        return int(port_str)
    except ValueError:
        return 8080


class ConsoleConfig(BaseSettings):
    """Configuration for the tailoring console."""

    model_config = SettingsConfigDict(
        env_prefix="CONSOLE_",
        env_file=".env",
        extra="ignore",
    )

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    # CORS configuration
    cors_origins: str = "*"

    # Tailoring service
    backend_url: Optional[str] = None       # e.g. "http://localhost:8000"
    request_timeout: float = 120.0          # seconds, applied by the HTTP transport

    # Simulation mode (for running without a tailoring service)
    use_simulation: bool = False

    # Export request defaults
    export_filename: str = "tailored_resume.docx"
    export_title: str = "TAILORED RESUME"

    @field_validator("backend_url", mode="before")
    @classmethod
    def normalize_backend_url(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        if not v:
            return None
        return v.rstrip("/")

    @property
    def backend_configured(self) -> bool:
        return self.backend_url is not None


def get_config() -> ConsoleConfig:
    """Get console configuration from environment."""
    config = ConsoleConfig()
    config_dict = config.model_dump()
    config_dict["port"] = get_port_from_env()
    return ConsoleConfig(**config_dict)


def log_backend_status(config: Optional[ConsoleConfig] = None):
    """Log whether the tailoring service address is set at startup."""
    config = config or get_config()
    if config.use_simulation:
        logger.info("Simulation mode ON - tailoring service calls are simulated")
    elif config.backend_configured:
        logger.info(f"Tailoring service: {config.backend_url}")
    else:
        logger.warning("CONSOLE_BACKEND_URL NOT SET - workflow runs will fail until it is configured")
