"""Configuration settings for LearnX."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from learnx.core.errors import ConfigurationError

# =============================================================================
# Path Configuration (always relative to project structure)
# =============================================================================

PACKAGE_ROOT = Path(__file__).parent.parent
PROJECT_ROOT = PACKAGE_ROOT.parent.parent
CONFIG_FILE = Path(os.getenv("LEARNX_CONFIG", PROJECT_ROOT / "configs" / "config.yaml"))

# Environment variables holding the required secrets
ENV_BACKEND_URL = "SUPABASE_URL"
ENV_BACKEND_KEY = "SUPABASE_KEY"
ENV_GATEWAY_API_KEY = "AI_GATEWAY_API_KEY"

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_TEXT_MODEL = "google/gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "google/gemini-2.5-flash-image-preview"
DEFAULT_CHUNK_SIZE = 32768


# =============================================================================
# Config Loading
# =============================================================================


def load_config() -> dict[str, Any]:
    """Load configuration from config.yaml."""
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE) as f:
            return yaml.safe_load(f) or {}
    return {}


def get_config(key: str, default: Any = None) -> Any:
    """Get a config value by dot-notation key (e.g., 'api.port')."""
    config = load_config()
    keys = key.split(".")
    value = config
    for k in keys:
        if isinstance(value, dict):
            value = value.get(k)
        else:
            return default
    return value if value is not None else default


# =============================================================================
# Convenience accessors
# =============================================================================


def get_api_host() -> str:
    return get_config("api.host", "0.0.0.0")


def get_api_port() -> int:
    return get_config("api.port", 8000)


def get_api_base_url() -> str:
    return os.getenv("LEARNX_API_URL") or f"http://localhost:{get_api_port()}"


def get_request_timeout() -> int:
    return get_config("frontend.request_timeout", 300)


def get_speech_voice() -> str:
    return get_config("speech.voice", "en-US-JennyNeural")


def get_log_level() -> str:
    return str(get_config("logging.level", "INFO")).upper()


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once for the current process."""
    logging.basicConfig(
        level=level or get_log_level(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


# =============================================================================
# Process-wide settings
# =============================================================================


class Settings(BaseModel):
    """Settings resolved once at startup."""

    backend_url: str = Field(description="Managed backend project URL")
    backend_key: str = Field(description="Managed backend project key")
    gateway_api_key: str = Field(description="Bearer token for the AI Gateway")
    gateway_url: str = Field(default=DEFAULT_GATEWAY_URL)
    text_model: str = Field(default=DEFAULT_TEXT_MODEL)
    image_model: str = Field(default=DEFAULT_IMAGE_MODEL)
    images_table: str = Field(default="generated_images")
    realtime_channel: str = Field(default="gallery-changes")
    decode_chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0, multiple_of=4)


def load_settings(env: dict[str, str] | None = None) -> Settings:
    """Build Settings from the environment and config.yaml.

    Args:
        env: Mapping to read secrets from. Defaults to os.environ after
            loading any .env file.

    Raises:
        ConfigurationError: If any required key is missing or blank, or a
            configured value is invalid.
    """
    if env is None:
        load_dotenv()
        env = dict(os.environ)

    required = {
        "backend_url": ENV_BACKEND_URL,
        "backend_key": ENV_BACKEND_KEY,
        "gateway_api_key": ENV_GATEWAY_API_KEY,
    }
    values = {field: (env.get(name) or "").strip() for field, name in required.items()}
    missing = [required[field] for field, value in values.items() if not value]
    if missing:
        raise ConfigurationError(missing)

    try:
        return Settings(
            **values,
            gateway_url=get_config("gateway.url", DEFAULT_GATEWAY_URL),
            text_model=get_config("gateway.text_model", DEFAULT_TEXT_MODEL),
            image_model=get_config("gateway.image_model", DEFAULT_IMAGE_MODEL),
            images_table=get_config("backend.images_table", "generated_images"),
            realtime_channel=get_config("backend.realtime_channel", "gallery-changes"),
            decode_chunk_size=get_config("audio.decode_chunk_size", DEFAULT_CHUNK_SIZE),
        )
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(message=f"Invalid configuration: {details}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide Settings, loading them on first use."""
    return load_settings()
