"""Pydantic schemas for the handler endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class HandlerModel(BaseModel):
    """Base for envelopes that use camelCase names on the wire."""

    model_config = ConfigDict(populate_by_name=True)


class GenerateImageRequest(HandlerModel):
    """Request for image generation."""

    prompt: str


class GenerateImageResponse(HandlerModel):
    """Response for image generation."""

    image_url: str = Field(alias="imageUrl")
    message: str


class GenerateContentRequest(HandlerModel):
    """Request for long-form content writing."""

    prompt: str


class GenerateContentResponse(HandlerModel):
    content: str


class AnalyzeSlidesRequest(HandlerModel):
    """Request for a slide outline of free text."""

    content: str


class AnalyzeSlidesResponse(HandlerModel):
    slides: str


class ExplainImageRequest(HandlerModel):
    """Request for an explanation of an uploaded image."""

    image: str = Field(description="Base64 image payload without data-URI prefix")
    mime_type: str = Field(alias="mimeType")


class ExplainImageResponse(HandlerModel):
    explanation: str


class SpeechToTextRequest(HandlerModel):
    """Request for an audio transcription."""

    audio: str = Field(description="Base64 audio payload without data-URI prefix")
    mime_type: str | None = Field(default=None, alias="mimeType")


class SpeechToTextResponse(HandlerModel):
    text: str
