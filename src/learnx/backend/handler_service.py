"""Handler service that turns each endpoint request into one gateway call."""

from __future__ import annotations

import logging

from learnx.core.config import Settings
from learnx.core.errors import GatewayError, MissingFieldError, PayloadError
from learnx.core.gateway import GatewayClient
from learnx.core.prompts import load_prompt
from learnx.core.prompts.prompt_templates import (
    ANALYZE_SLIDES_MESSAGE,
    EXPLAIN_IMAGE_MESSAGE,
    GENERATE_CONTENT_MESSAGE,
    GENERATE_IMAGE_MESSAGE,
    IMAGE_DATA_URI,
    TRANSCRIBE_AUDIO_MESSAGE,
)
from learnx.core.schemas import (
    AudioFormat,
    ChatCompletion,
    ChatMessage,
    ImageUrl,
    ImageUrlPart,
    InputAudio,
    InputAudioPart,
    Role,
    TextPart,
)
from learnx.backend.schemas import (
    AnalyzeSlidesRequest,
    AnalyzeSlidesResponse,
    ExplainImageRequest,
    ExplainImageResponse,
    GenerateContentRequest,
    GenerateContentResponse,
    GenerateImageRequest,
    GenerateImageResponse,
    SpeechToTextRequest,
    SpeechToTextResponse,
)
from learnx.utils.base64_tools import decode_base64_chunked

logger = logging.getLogger(__name__)

# Substituted when the gateway answers without message content
CONTENT_FALLBACK = "Unable to generate content."
SLIDES_FALLBACK = "Unable to generate slides."
EXPLANATION_FALLBACK = "Unable to analyze the image."
TRANSCRIPTION_FALLBACK = "Unable to transcribe audio."
IMAGE_MESSAGE_FALLBACK = "Image generated successfully"

IMAGE_MODALITIES = ["image", "text"]


def _text_or_fallback(completion: ChatCompletion, fallback: str) -> str:
    try:
        return completion.text_content()
    except MissingFieldError as e:
        logger.warning("%s; using fallback %r", e, fallback)
        return fallback


class HandlerService:
    """Builds the gateway call for each handler and reshapes the result."""

    def __init__(self, gateway: GatewayClient, settings: Settings):
        self.gateway = gateway
        self.settings = settings
        self._content_system_prompt = load_prompt("content_writer")
        self._slides_system_prompt = load_prompt("presentation_designer")

    def generate_image(self, request: GenerateImageRequest) -> GenerateImageResponse:
        """Generate an educational image from a prompt.

        A response without an image is a hard failure.
        """
        logger.info("Generating image for prompt: %s", request.prompt)

        completion = self.gateway.complete(
            model=self.settings.image_model,
            messages=[
                ChatMessage(
                    role=Role.USER,
                    content=GENERATE_IMAGE_MESSAGE.format(prompt=request.prompt),
                )
            ],
            modalities=IMAGE_MODALITIES,
        )
        logger.info("Response structure: %s", completion.structure_summary())

        try:
            image_url = completion.first_image_url()
        except MissingFieldError as e:
            logger.error(
                "No image URL found in response: %s",
                completion.model_dump_json()[:500],
            )
            raise GatewayError("Failed to generate image - no image in response") from e

        logger.info("Found image URL, length: %d", len(image_url))
        return GenerateImageResponse(
            image_url=image_url,
            message=completion.message.content or IMAGE_MESSAGE_FALLBACK,
        )

    def generate_content(self, request: GenerateContentRequest) -> GenerateContentResponse:
        """Write long-form content about a topic."""
        logger.info("Generating content for: %s", request.prompt)

        completion = self.gateway.complete(
            model=self.settings.text_model,
            messages=[
                ChatMessage(role=Role.SYSTEM, content=self._content_system_prompt),
                ChatMessage(
                    role=Role.USER,
                    content=GENERATE_CONTENT_MESSAGE.format(prompt=request.prompt),
                ),
            ],
        )
        logger.info("Content generated successfully")

        return GenerateContentResponse(
            content=_text_or_fallback(completion, CONTENT_FALLBACK)
        )

    def analyze_text_for_slides(self, request: AnalyzeSlidesRequest) -> AnalyzeSlidesResponse:
        """Break free text down into a slide outline."""
        logger.info("Analyzing content for slides, length: %d", len(request.content))

        completion = self.gateway.complete(
            model=self.settings.text_model,
            messages=[
                ChatMessage(role=Role.SYSTEM, content=self._slides_system_prompt),
                ChatMessage(
                    role=Role.USER,
                    content=ANALYZE_SLIDES_MESSAGE.format(content=request.content),
                ),
            ],
        )
        logger.info("Slides generated successfully")

        return AnalyzeSlidesResponse(slides=_text_or_fallback(completion, SLIDES_FALLBACK))

    def explain_image(self, request: ExplainImageRequest) -> ExplainImageResponse:
        """Explain an uploaded image for students."""
        logger.info("Analyzing image, mimeType: %s", request.mime_type)

        data_uri = IMAGE_DATA_URI.format(mime_type=request.mime_type, data=request.image)
        completion = self.gateway.complete(
            model=self.settings.text_model,
            messages=[
                ChatMessage(
                    role=Role.USER,
                    content=[
                        TextPart(text=EXPLAIN_IMAGE_MESSAGE),
                        ImageUrlPart(image_url=ImageUrl(url=data_uri)),
                    ],
                )
            ],
        )
        logger.info("Analysis complete")

        return ExplainImageResponse(
            explanation=_text_or_fallback(completion, EXPLANATION_FALLBACK)
        )

    def speech_to_text(self, request: SpeechToTextRequest) -> SpeechToTextResponse:
        """Transcribe an uploaded audio clip.

        The payload is decoded chunk by chunk only to validate it; the
        original base64 text is what gets forwarded to the gateway.
        """
        logger.info("Transcribing audio, mimeType: %s", request.mime_type)

        if not request.audio:
            raise PayloadError("No audio data provided")

        try:
            audio_bytes = decode_base64_chunked(
                request.audio, self.settings.decode_chunk_size
            )
        except ValueError as e:
            raise PayloadError(f"Audio is not valid base64: {e}") from e
        logger.info("Decoded audio payload: %d bytes", len(audio_bytes))

        completion = self.gateway.complete(
            model=self.settings.text_model,
            messages=[
                ChatMessage(
                    role=Role.USER,
                    content=[
                        TextPart(text=TRANSCRIBE_AUDIO_MESSAGE),
                        InputAudioPart(
                            input_audio=InputAudio(
                                data=request.audio,
                                format=AudioFormat.from_mime_type(request.mime_type),
                            )
                        ),
                    ],
                )
            ],
        )
        logger.info("Transcription complete")

        return SpeechToTextResponse(text=_text_or_fallback(completion, TRANSCRIPTION_FALLBACK))
