"""Tests for the handler endpoints."""

import base64

import pytest
from fastapi.testclient import TestClient

from conftest import RecordingGateway, completion
from learnx.backend.api import CORS_HEADERS, HANDLER_NAMES, create_app
from learnx.core.errors import GatewayError
from learnx.core.schemas import Role

AUDIO_B64 = base64.b64encode(b"RIFF fake wav payload").decode()


def client_for(settings, body=None, error=None):
    gateway = RecordingGateway(body=body, error=error)
    return TestClient(create_app(settings, gateway=gateway)), gateway


def assert_cors(response):
    for header, value in CORS_HEADERS.items():
        assert response.headers[header] == value


# ============================================================================
# Preflight and envelopes
# ============================================================================


@pytest.mark.parametrize("name", HANDLER_NAMES)
def test_options_returns_empty_body_with_cors_headers(api_client, gateway, name):
    response = api_client.options(f"/functions/{name}")

    assert response.status_code == 200
    assert response.content == b""
    assert_cors(response)
    assert gateway.calls == []


def test_success_response_carries_cors_headers(api_client):
    response = api_client.post("/functions/generate-content", json={"prompt": "tides"})

    assert response.status_code == 200
    assert_cors(response)


def test_gateway_failure_returns_error_envelope(settings):
    client, _ = client_for(settings, error=GatewayError("API error: 429"))

    response = client.post("/functions/generate-content", json={"prompt": "tides"})

    assert response.status_code == 500
    assert response.json() == {"error": "API error: 429"}
    assert_cors(response)


def test_missing_required_field_returns_error_envelope(api_client, gateway):
    response = api_client.post("/functions/analyze-text-for-slides", json={})

    assert response.status_code == 500
    assert "content" in response.json()["error"]
    assert gateway.calls == []


def test_unexpected_exception_returns_error_envelope(settings):
    client, _ = client_for(settings, error=RuntimeError("gateway client crashed"))
    client = TestClient(client.app, raise_server_exceptions=False)

    response = client.post("/functions/generate-content", json={"prompt": "tides"})

    assert response.status_code == 500
    assert response.json() == {"error": "gateway client crashed"}
    assert_cors(response)


def test_health(api_client):
    assert api_client.get("/health").json() == {"status": "healthy"}


# ============================================================================
# generate-content
# ============================================================================


def test_generate_content_returns_gateway_content(settings):
    client, gateway = client_for(settings, body=completion("Volcanoes are..."))

    response = client.post("/functions/generate-content", json={"prompt": "volcanoes"})

    assert response.status_code == 200
    assert response.json() == {"content": "Volcanoes are..."}

    (call,) = gateway.calls
    assert call["model"] == settings.text_model
    assert [m.role for m in call["messages"]] == [Role.SYSTEM, Role.USER]
    assert "about: volcanoes" in call["messages"][1].content


def test_generate_content_falls_back_when_content_missing(settings):
    client, _ = client_for(settings, body={"choices": []})

    response = client.post("/functions/generate-content", json={"prompt": "volcanoes"})

    assert response.status_code == 200
    assert response.json() == {"content": "Unable to generate content."}


# ============================================================================
# generate-image
# ============================================================================


def test_generate_image_returns_url_and_message(settings):
    body = completion("Here is your diagram", images=["data:image/png;base64,iVBORw0KGgo="])
    client, gateway = client_for(settings, body=body)

    response = client.post("/functions/generate-image", json={"prompt": "the water cycle"})

    assert response.status_code == 200
    assert response.json() == {
        "imageUrl": "data:image/png;base64,iVBORw0KGgo=",
        "message": "Here is your diagram",
    }
    (call,) = gateway.calls
    assert call["model"] == settings.image_model
    assert call["modalities"] == ["image", "text"]
    assert len(call["messages"]) == 1
    assert "the water cycle" in call["messages"][0].content


def test_generate_image_defaults_message(settings):
    client, _ = client_for(settings, body=completion(None, images=["https://img.test/a.png"]))

    response = client.post("/functions/generate-image", json={"prompt": "a cell"})

    assert response.json()["message"] == "Image generated successfully"


def test_generate_image_without_images_is_error(settings):
    client, _ = client_for(settings, body=completion("I cannot draw that"))

    response = client.post("/functions/generate-image", json={"prompt": "a cell"})

    assert response.status_code == 500
    assert "no image in response" in response.json()["error"]


# ============================================================================
# explain-image and speech-to-text
# ============================================================================


def test_explain_image_sends_data_uri(settings):
    client, gateway = client_for(settings, body=completion("A mitochondrion"))

    response = client.post(
        "/functions/explain-image", json={"image": "iVBORw0KGgo=", "mimeType": "image/png"}
    )

    assert response.json() == {"explanation": "A mitochondrion"}
    text_part, image_part = gateway.calls[0]["messages"][0].content
    assert text_part.type == "text"
    assert image_part.image_url.url == "data:image/png;base64,iVBORw0KGgo="


def test_explain_image_falls_back_when_content_missing(settings):
    client, _ = client_for(settings, body=completion(None))

    response = client.post(
        "/functions/explain-image", json={"image": "iVBORw0KGgo=", "mimeType": "image/png"}
    )

    assert response.status_code == 200
    assert response.json() == {"explanation": "Unable to analyze the image."}


def test_speech_to_text_falls_back_when_content_missing(settings):
    client, _ = client_for(settings, body=completion(""))

    response = client.post(
        "/functions/speech-to-text", json={"audio": AUDIO_B64, "mimeType": "audio/wav"}
    )

    assert response.status_code == 200
    assert response.json() == {"text": "Unable to transcribe audio."}


@pytest.mark.parametrize(
    "mime_type, expected",
    [
        ("audio/wav", "wav"),
        ("audio/x-wav", "wav"),
        ("audio/mp3", "mp3"),
        ("audio/mpeg", "mp3"),
        (None, "mp3"),
    ],
)
def test_speech_to_text_forwards_original_base64(settings, mime_type, expected):
    client, gateway = client_for(settings, body=completion("hello class"))

    response = client.post(
        "/functions/speech-to-text", json={"audio": AUDIO_B64, "mimeType": mime_type}
    )

    assert response.json() == {"text": "hello class"}
    _, audio_part = gateway.calls[0]["messages"][0].content
    assert audio_part.input_audio.data == AUDIO_B64
    assert audio_part.input_audio.format.value == expected


def test_speech_to_text_rejects_empty_audio(api_client, gateway):
    response = api_client.post("/functions/speech-to-text", json={"audio": ""})

    assert response.status_code == 500
    assert response.json() == {"error": "No audio data provided"}
    assert gateway.calls == []


def test_speech_to_text_rejects_invalid_base64(api_client, gateway):
    response = api_client.post("/functions/speech-to-text", json={"audio": "not base64!"})

    assert response.status_code == 500
    assert "not valid base64" in response.json()["error"]
    assert gateway.calls == []


# ============================================================================
# analyze-text-for-slides
# ============================================================================


def test_analyze_slides_is_deterministic(settings):
    outline = "## Slide 1: Photosynthesis\n- Light\n- Water\n- CO2"
    client, gateway = client_for(settings, body=completion(outline))
    body = {"content": "Plants convert light into chemical energy."}

    first = client.post("/functions/analyze-text-for-slides", json=body)
    second = client.post("/functions/analyze-text-for-slides", json=body)

    assert first.content == second.content
    assert first.json() == {"slides": outline}
    assert gateway.calls[0]["messages"] == gateway.calls[1]["messages"]
