"""Runtime configuration, read from the environment (and a local .env file)."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

# load environment variables from .env file
load_dotenv()

DEFAULT_BASE_URL = "http://localhost:8080/api"
DEFAULT_TIMEOUT = 10.0
DEFAULT_ARCHITECTURE_NAME = "My Architecture"


@dataclass
class ServiceConfig:
    """Connection settings for the remote graph service."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT  # seconds, applied to every remote call
    architecture_name: str = DEFAULT_ARCHITECTURE_NAME

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        return cls(
            base_url=os.getenv("ARCHFLOW_BASE_URL", DEFAULT_BASE_URL),
            timeout=float(os.getenv("ARCHFLOW_TIMEOUT", str(DEFAULT_TIMEOUT))),
            architecture_name=os.getenv(
                "ARCHFLOW_ARCHITECTURE_NAME", DEFAULT_ARCHITECTURE_NAME
            ),
        )


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for scripts; libraries only create loggers."""
    level_name = (level or os.getenv("ARCHFLOW_LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
