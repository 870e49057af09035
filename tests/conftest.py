"""Shared fixtures for the LearnX test suite."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from learnx.backend.api import create_app
from learnx.core.config import Settings
from learnx.core.errors import LearnXError
from learnx.core.gateway import GatewayClient
from learnx.core.schemas import ChatCompletion, ChatMessage


def completion(content: str | None = None, images: list[str] | None = None) -> dict:
    """Build a gateway response body."""
    message: dict[str, Any] = {"role": "assistant", "content": content}
    if images is not None:
        message["images"] = [
            {"type": "image_url", "image_url": {"url": url}} for url in images
        ]
    return {"id": "chatcmpl-1", "choices": [{"index": 0, "message": message}]}


class RecordingGateway(GatewayClient):
    """Gateway double that records calls and replays a canned body."""

    def __init__(self, body: dict | None = None, error: LearnXError | None = None):
        super().__init__(url="https://gateway.test/v1/chat/completions", api_key="test")
        self.body = body if body is not None else completion("ok")
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def complete(
        self,
        model: str,
        messages: list[ChatMessage],
        modalities: list[str] | None = None,
    ) -> ChatCompletion:
        self.calls.append({"model": model, "messages": messages, "modalities": modalities})
        if self.error is not None:
            raise self.error
        return ChatCompletion.model_validate(self.body)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        backend_url="https://project.supabase.test",
        backend_key="anon-key",
        gateway_api_key="gateway-secret",
        decode_chunk_size=8,
    )


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def api_client(settings: Settings, gateway: RecordingGateway) -> TestClient:
    return TestClient(create_app(settings, gateway=gateway))
