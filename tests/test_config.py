"""Tests for startup configuration."""

import pytest

from learnx.core import config
from learnx.core.config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_TEXT_MODEL,
    Settings,
    get_config,
    load_settings,
)
from learnx.core.errors import ConfigurationError

FULL_ENV = {
    "SUPABASE_URL": "https://project.supabase.test",
    "SUPABASE_KEY": "anon-key",
    "AI_GATEWAY_API_KEY": "gateway-secret",
}


@pytest.fixture
def empty_config(monkeypatch):
    monkeypatch.setattr(config, "load_config", lambda: {})


def test_all_missing_keys_are_named(empty_config):
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings({})

    assert excinfo.value.missing == ["SUPABASE_URL", "SUPABASE_KEY", "AI_GATEWAY_API_KEY"]
    assert "AI_GATEWAY_API_KEY" in str(excinfo.value)


def test_blank_key_counts_as_missing(empty_config):
    env = dict(FULL_ENV, AI_GATEWAY_API_KEY="   ")

    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(env)

    assert excinfo.value.missing == ["AI_GATEWAY_API_KEY"]


def test_full_environment_uses_defaults(empty_config):
    settings = load_settings(FULL_ENV)

    assert settings.backend_url == "https://project.supabase.test"
    assert settings.gateway_api_key == "gateway-secret"
    assert settings.text_model == DEFAULT_TEXT_MODEL
    assert settings.image_model == DEFAULT_IMAGE_MODEL
    assert settings.decode_chunk_size == DEFAULT_CHUNK_SIZE


def test_config_file_overrides_defaults(monkeypatch):
    monkeypatch.setattr(
        config,
        "load_config",
        lambda: {"gateway": {"text_model": "custom/model"}, "audio": {"decode_chunk_size": 1024}},
    )

    settings = load_settings(FULL_ENV)

    assert settings.text_model == "custom/model"
    assert settings.decode_chunk_size == 1024


def test_get_config_dot_notation(monkeypatch):
    monkeypatch.setattr(config, "load_config", lambda: {"api": {"port": 9000, "host": None}})

    assert get_config("api.port") == 9000
    assert get_config("api.host", "0.0.0.0") == "0.0.0.0"
    assert get_config("api.port.deeper", "fallback") == "fallback"
    assert get_config("missing.key") is None


@pytest.mark.parametrize("chunk_size", [1025, 6, 0, -4])
def test_chunk_size_must_be_positive_multiple_of_four(monkeypatch, chunk_size):
    monkeypatch.setattr(config, "load_config", lambda: {"audio": {"decode_chunk_size": chunk_size}})

    with pytest.raises(ConfigurationError, match="decode_chunk_size"):
        load_settings(FULL_ENV)


def test_settings_reject_chunk_size_not_multiple_of_four():
    with pytest.raises(ValueError):
        Settings(
            backend_url="https://project.supabase.test",
            backend_key="anon-key",
            gateway_api_key="gateway-secret",
            decode_chunk_size=1025,
        )


def test_core_exports_resolve():
    import learnx.core as core

    assert "PROMPTS_DIR" not in core.__all__
    for name in core.__all__:
        assert hasattr(core, name)
