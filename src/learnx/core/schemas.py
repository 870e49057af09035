"""Pydantic models for AI Gateway communication and gallery records."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from learnx.core.errors import MissingFieldError


# ============================================================================
# Enums
# ============================================================================


class Role(str, Enum):
    """Chat message roles understood by the gateway."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class AudioFormat(str, Enum):
    """Inline audio formats accepted by the gateway."""

    MP3 = "mp3"
    WAV = "wav"

    @classmethod
    def from_mime_type(cls, mime_type: str | None) -> AudioFormat:
        """Pick the gateway format for a browser mime type (mp3 unless wav)."""
        mime_type = mime_type or ""
        if "mp3" in mime_type:
            return cls.MP3
        if "wav" in mime_type:
            return cls.WAV
        return cls.MP3


# ============================================================================
# Request Message Models
# ============================================================================


class ImageUrl(BaseModel):
    """A URL or data-URI pointing at an image."""

    url: str | None = None


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageUrlPart(BaseModel):
    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl


class InputAudio(BaseModel):
    data: str = Field(description="Base64 audio payload")
    format: AudioFormat


class InputAudioPart(BaseModel):
    type: Literal["input_audio"] = "input_audio"
    input_audio: InputAudio


ContentPart = Union[TextPart, ImageUrlPart, InputAudioPart]


class ChatMessage(BaseModel):
    """One message in a chat-completion request."""

    role: Role
    content: str | list[ContentPart]


class ChatCompletionRequest(BaseModel):
    """Body posted to the AI Gateway chat-completions endpoint."""

    model: str = Field(description="Gateway model identifier")
    messages: list[ChatMessage] = Field(default_factory=list)
    modalities: list[str] | None = Field(
        default=None, description="Requested response modalities"
    )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


# ============================================================================
# Response Models
# ============================================================================


class GeneratedImage(BaseModel):
    """Inline media attached to a completion message."""

    model_config = ConfigDict(extra="allow")

    type: str = "image_url"
    image_url: ImageUrl | None = None


class CompletionMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str = "assistant"
    content: str | None = None
    images: list[GeneratedImage] | None = None


class CompletionChoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    index: int = 0
    message: CompletionMessage | None = None


class ChatCompletion(BaseModel):
    """Decoded gateway response.

    The accessors raise MissingFieldError instead of returning None so that
    callers decide between a fallback and a hard failure.
    """

    model_config = ConfigDict(extra="allow")

    choices: list[CompletionChoice] = Field(default_factory=list)

    @property
    def message(self) -> CompletionMessage:
        if not self.choices or self.choices[0].message is None:
            raise MissingFieldError("choices[0].message")
        return self.choices[0].message

    def text_content(self) -> str:
        """Return choices[0].message.content."""
        content = self.message.content
        if not content:
            raise MissingFieldError("choices[0].message.content")
        return content

    def first_image_url(self) -> str:
        """Return choices[0].message.images[0].image_url.url."""
        images = self.message.images
        if not images:
            raise MissingFieldError("choices[0].message.images")
        image_url = images[0].image_url
        if image_url is None or not image_url.url:
            raise MissingFieldError("choices[0].message.images[0].image_url.url")
        return image_url.url

    def structure_summary(self) -> dict:
        """Summarize which nested fields are present, for logging."""
        message = self.choices[0].message if self.choices else None
        images = message.images if message else None
        return {
            "hasChoices": bool(self.choices),
            "hasMessage": message is not None,
            "hasImages": images is not None,
            "imagesLength": len(images) if images is not None else None,
        }


# ============================================================================
# Gallery Models
# ============================================================================


class NewImageRecord(BaseModel):
    """Fields supplied by the client when saving a generated image."""

    prompt: str = Field(min_length=1, description="Text description of the image")
    image_url: str = Field(min_length=1, description="URL or data-URI of the image")


class GeneratedImageRecord(NewImageRecord):
    """A persisted gallery row. Rows are inserted or deleted, never updated."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Backend-assigned unique identifier")
    created_at: datetime = Field(description="Backend-assigned creation time")


class ChangeType(str, Enum):
    """Realtime change notification kinds."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ChangeEvent(BaseModel):
    """A realtime notification for one row of the images table."""

    type: ChangeType
    table: str
    record_id: str | None = None
