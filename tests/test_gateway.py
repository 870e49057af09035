"""Tests for the AI Gateway client and completion schemas."""

import logging
from unittest.mock import MagicMock

import pytest
import requests

from learnx.core.errors import GatewayError, MissingFieldError
from learnx.core.gateway import GatewayClient
from learnx.core.schemas import AudioFormat, ChatCompletion, ChatMessage, Role


def make_client(response=None, error=None):
    session = MagicMock(spec=requests.Session)
    if error is not None:
        session.post.side_effect = error
    else:
        session.post.return_value = response
    return GatewayClient("https://gateway.test/v1/chat", "secret", session=session), session


def make_response(status_code=200, body=None, text=""):
    response = MagicMock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.text = text
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


def test_complete_posts_bearer_and_payload():
    body = {"choices": [{"message": {"content": "hi"}}]}
    client, session = make_client(make_response(body=body))

    result = client.complete("google/gemini-2.5-flash", [ChatMessage(role=Role.USER, content="hello")])

    assert result.text_content() == "hi"
    _, kwargs = session.post.call_args
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["json"] == {
        "model": "google/gemini-2.5-flash",
        "messages": [{"role": "user", "content": "hello"}],
    }


def test_complete_includes_modalities_when_requested():
    client, session = make_client(make_response(body={"choices": []}))

    client.complete("img-model", [ChatMessage(role=Role.USER, content="x")], modalities=["image", "text"])

    assert session.post.call_args.kwargs["json"]["modalities"] == ["image", "text"]


def test_non_success_status_raises_and_logs_body(caplog):
    client, _ = make_client(make_response(status_code=401, text='{"error":"bad key"}'))

    with caplog.at_level(logging.ERROR, logger="learnx.core.gateway"):
        with pytest.raises(GatewayError, match="API error: 401"):
            client.complete("m", [ChatMessage(role=Role.USER, content="x")])

    assert "bad key" in caplog.text


def test_transport_error_raises_gateway_error():
    client, _ = make_client(error=requests.exceptions.ConnectionError("refused"))

    with pytest.raises(GatewayError, match="refused"):
        client.complete("m", [ChatMessage(role=Role.USER, content="x")])


def test_undecodable_body_raises_gateway_error():
    client, _ = make_client(make_response(body=ValueError("not json")))

    with pytest.raises(GatewayError, match="Malformed"):
        client.complete("m", [ChatMessage(role=Role.USER, content="x")])


# ============================================================================
# ChatCompletion accessors
# ============================================================================


@pytest.mark.parametrize(
    "body, field",
    [
        ({}, "choices[0].message"),
        ({"choices": [{"index": 0}]}, "choices[0].message"),
        ({"choices": [{"message": {"content": None}}]}, "choices[0].message.content"),
        ({"choices": [{"message": {"content": ""}}]}, "choices[0].message.content"),
    ],
)
def test_text_content_missing_field(body, field):
    with pytest.raises(MissingFieldError) as excinfo:
        ChatCompletion.model_validate(body).text_content()
    assert excinfo.value.field_path == field


@pytest.mark.parametrize(
    "message",
    [
        {"content": "no images"},
        {"images": []},
        {"images": [{"type": "image_url"}]},
        {"images": [{"type": "image_url", "image_url": {}}]},
    ],
)
def test_first_image_url_missing(message):
    with pytest.raises(MissingFieldError):
        ChatCompletion.model_validate({"choices": [{"message": message}]}).first_image_url()


def test_first_image_url_present():
    body = {"choices": [{"message": {"images": [{"image_url": {"url": "https://x/y.png"}}]}}]}

    completion = ChatCompletion.model_validate(body)

    assert completion.first_image_url() == "https://x/y.png"
    assert completion.structure_summary() == {
        "hasChoices": True,
        "hasMessage": True,
        "hasImages": True,
        "imagesLength": 1,
    }


@pytest.mark.parametrize(
    "mime_type, expected",
    [("audio/wav", AudioFormat.WAV), ("audio/mp3", AudioFormat.MP3), ("audio/ogg", AudioFormat.MP3), (None, AudioFormat.MP3)],
)
def test_audio_format_from_mime_type(mime_type, expected):
    assert AudioFormat.from_mime_type(mime_type) is expected
