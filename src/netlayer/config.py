"""
Configuration management for netlayer.
"""

import logging
from typing import Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings shared by the transport and the dispatcher."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="NETLAYER_")

    timeout_seconds: float = 30.0
    user_agent: str = "netlayer/1.0"
    api_key: Optional[str] = None
    follow_redirects: bool = False
    verify_ssl: bool = True

    debug: bool = False
    log_level: str = "INFO"

    def setup_logging(self) -> None:
        """Configure logging for the package."""
        level_name = "DEBUG" if self.debug else self.log_level
        level = getattr(logging, level_name.upper(), logging.INFO)

        logger = logging.getLogger("netlayer")
        logger.setLevel(level)

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

    def default_headers(self) -> Dict[str, str]:
        """Headers sent with every request unless the request overrides them."""
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers


def get_settings() -> Settings:
    return Settings()


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name."""
    return logging.getLogger(f"netlayer.{name}")
