"""Core module for LearnX configuration, schemas and external services."""

from learnx.core.config import (
    CONFIG_FILE,
    PROJECT_ROOT,
    Settings,
    get_api_base_url,
    get_api_host,
    get_api_port,
    get_settings,
    load_settings,
    setup_logging,
)

__all__ = [
    "CONFIG_FILE",
    "PROJECT_ROOT",
    "Settings",
    "get_api_base_url",
    "get_api_host",
    "get_api_port",
    "get_settings",
    "load_settings",
    "setup_logging",
]
