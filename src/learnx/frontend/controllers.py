"""Page controllers: per-action state machines behind the UI.

Each action moves idle -> loading -> success | error. A second run while
loading raises ActionInProgressError; the UI disables the trigger instead of
relying on that. Errors other than LearnXError still end in the error state
and are re-raised. Results live only in controller state.
"""

from __future__ import annotations

import base64
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

import requests

from learnx.core.errors import GalleryError, LearnXError
from learnx.core.gallery import ChangeFeed, GalleryRepository, Subscription
from learnx.core.schemas import ChangeEvent, GeneratedImageRecord, NewImageRecord
from learnx.frontend.client import FunctionInvocationError, FunctionsClient
from learnx.frontend.speech import synthesize_speech
from learnx.utils.base64_tools import decode_base64, split_data_uri

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ActionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class ActionInProgressError(LearnXError):
    """Raised when an action is triggered while it is already loading."""

    pass


@dataclass
class Notice:
    """Transient notification shown after an action (a toast)."""

    title: str
    description: str | None = None
    variant: str = "default"

    @property
    def destructive(self) -> bool:
        return self.variant == "destructive"


def _require(data: dict[str, Any], key: str, function: str) -> Any:
    if key not in data:
        raise FunctionInvocationError(f"Function {function} response is missing '{key}'")
    return data[key]


# ============================================================================
# Base Controller
# ============================================================================


class ActionController(Generic[T]):
    """State machine for a single action button."""

    failure_title = "Action failed"

    def __init__(self):
        self.state = ActionState.IDLE
        self.result: T | None = None
        self.error: str | None = None
        self.notice: Notice | None = None
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self.state is ActionState.LOADING

    def reset(self) -> None:
        with self._lock:
            self.state = ActionState.IDLE
            self.result = None
            self.error = None

    def pop_notice(self) -> Notice | None:
        """Return the pending notice and clear it."""
        notice, self.notice = self.notice, None
        return notice

    def _reject(self, title: str) -> None:
        self.notice = Notice(title, variant="destructive")
        return None

    def _run(self, action: Callable[[], T], success_title: str) -> T | None:
        with self._lock:
            if self.state is ActionState.LOADING:
                raise ActionInProgressError("This action is already running")
            self.state = ActionState.LOADING
            self.error = None

        try:
            result = action()
        except LearnXError as e:
            with self._lock:
                self.state = ActionState.ERROR
                self.error = str(e)
            self.notice = Notice(self.failure_title, str(e), variant="destructive")
            return None
        except Exception as e:
            # Unexpected errors propagate, but must not leave the action stuck in LOADING
            with self._lock:
                self.state = ActionState.ERROR
                self.error = str(e)
            raise

        with self._lock:
            self.state = ActionState.SUCCESS
            self.result = result
        self.notice = Notice(success_title)
        return result


# ============================================================================
# Create Page
# ============================================================================


@dataclass
class ImageGenerationOutcome:
    """Result of generate-then-persist.

    Step 1 (generation) always succeeded when this exists; step 2
    (persistence) succeeded when record is set, otherwise save_error says why.
    """

    prompt: str
    image_url: str
    message: str
    record: GeneratedImageRecord | None = None
    save_error: str | None = None

    @property
    def saved(self) -> bool:
        return self.record is not None


class ImageGeneratorController(ActionController[ImageGenerationOutcome]):
    failure_title = "Failed to generate image"

    def __init__(self, client: FunctionsClient, repository: GalleryRepository):
        super().__init__()
        self.client = client
        self.repository = repository

    def generate(self, prompt: str) -> ImageGenerationOutcome | None:
        if not prompt.strip():
            return self._reject("Please enter a prompt")
        return self._run(
            lambda: self._generate(prompt),
            success_title="Image generated and saved to gallery!",
        )

    def _generate(self, prompt: str) -> ImageGenerationOutcome:
        data = self.client.invoke("generate-image", {"prompt": prompt})
        outcome = ImageGenerationOutcome(
            prompt=prompt,
            image_url=_require(data, "imageUrl", "generate-image"),
            message=data.get("message", ""),
        )

        # Persisting is best-effort; a failure must not hide the generated image
        try:
            outcome.record = self.repository.insert_image(
                NewImageRecord(prompt=prompt, image_url=outcome.image_url)
            )
        except GalleryError as e:
            logger.error("Failed to save to gallery: %s", e)
            outcome.save_error = str(e)

        return outcome


class ImageAnalysisController(ActionController[str]):
    failure_title = "Failed to analyze image"

    def __init__(self, client: FunctionsClient):
        super().__init__()
        self.client = client

    def analyze(self, image: bytes | None, mime_type: str) -> str | None:
        if not image:
            return self._reject("Please select an image")
        payload = {
            "image": base64.b64encode(image).decode("ascii"),
            "mimeType": mime_type,
        }
        return self._run(
            lambda: _require(
                self.client.invoke("explain-image", payload), "explanation", "explain-image"
            ),
            success_title="Image analyzed successfully!",
        )


class ContentWriterController(ActionController[str]):
    failure_title = "Failed to generate content"

    def __init__(self, client: FunctionsClient):
        super().__init__()
        self.client = client

    def write(self, prompt: str) -> str | None:
        if not prompt.strip():
            return self._reject("Please enter a topic")
        return self._run(
            lambda: _require(
                self.client.invoke("generate-content", {"prompt": prompt}),
                "content",
                "generate-content",
            ),
            success_title="Content generated successfully!",
        )


class SlideGeneratorController(ActionController[str]):
    failure_title = "Failed to generate slides"

    def __init__(self, client: FunctionsClient):
        super().__init__()
        self.client = client

    def generate(self, content: str) -> str | None:
        if not content.strip():
            return self._reject("Please enter content for slides")
        return self._run(
            lambda: _require(
                self.client.invoke("analyze-text-for-slides", {"content": content}),
                "slides",
                "analyze-text-for-slides",
            ),
            success_title="Slides generated successfully!",
        )


# ============================================================================
# Audio Page
# ============================================================================


class TranscriptionController(ActionController[str]):
    failure_title = "Failed to transcribe audio"

    def __init__(self, client: FunctionsClient):
        super().__init__()
        self.client = client

    def transcribe(self, audio: bytes | None, mime_type: str) -> str | None:
        if not audio:
            return self._reject("Please select an audio file")
        payload = {
            "audio": base64.b64encode(audio).decode("ascii"),
            "mimeType": mime_type,
        }
        return self._run(
            lambda: _require(
                self.client.invoke("speech-to-text", payload), "text", "speech-to-text"
            ),
            success_title="Transcription complete!",
        )


class SpeechSynthesisController(ActionController[bytes]):
    """Text-to-speech; result holds MP3 bytes until stop() clears them."""

    failure_title = "Speech synthesis failed"

    def __init__(self, synthesize: Callable[..., bytes] = synthesize_speech):
        super().__init__()
        self.synthesize = synthesize

    def speak(
        self, text: str, rate: float = 1.0, pitch: float = 1.0, volume: float = 1.0
    ) -> bytes | None:
        if not text.strip():
            return self._reject("Please enter text to speak")
        return self._run(
            lambda: self.synthesize(text, rate=rate, pitch=pitch, volume=volume),
            success_title="Speech ready",
        )

    def stop(self) -> None:
        self.reset()


# ============================================================================
# Gallery Page
# ============================================================================


class GalleryController:
    """Gallery listing kept fresh by invalidate-and-refetch on every change."""

    def __init__(self, repository: GalleryRepository, feed: ChangeFeed):
        self.repository = repository
        self.feed = feed
        self.images: list[GeneratedImageRecord] = []
        self.loading = True
        self.selected: GeneratedImageRecord | None = None
        self.notice: Notice | None = None
        self._subscription: Subscription | None = None
        self._lock = threading.Lock()

    def start(self) -> None:
        """Load the listing and subscribe to changes on the images table."""
        self.refresh()
        if self._subscription is None:
            self._subscription = self.feed.subscribe(self._on_change)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def refresh(self) -> None:
        try:
            images = self.repository.list_images()
        except GalleryError as e:
            self.notice = Notice("Failed to load images", str(e), variant="destructive")
            return
        finally:
            self.loading = False

        with self._lock:
            self.images = images

    def _on_change(self, event: ChangeEvent) -> None:
        logger.debug("Gallery change %s on %s", event.type.value, event.record_id)
        self.refresh()

    def select(self, record_id: str | None) -> None:
        with self._lock:
            self.selected = next(
                (image for image in self.images if image.id == record_id), None
            )

    def delete(self, record_id: str) -> bool:
        """Delete a record; the listing refreshes through the change feed."""
        try:
            self.repository.delete_image(record_id)
        except GalleryError as e:
            self.notice = Notice("Failed to delete image", str(e), variant="destructive")
            return False

        self.notice = Notice("Image deleted successfully")
        self.selected = None
        return True

    def pop_notice(self) -> Notice | None:
        notice, self.notice = self.notice, None
        return notice


# ============================================================================
# Image helpers
# ============================================================================


def load_image_bytes(image_url: str, session: requests.Session | None = None) -> bytes:
    """Return the bytes behind a data-URI or http(s) image URL."""
    parts = split_data_uri(image_url)
    if parts is not None:
        return decode_base64(parts[1])

    try:
        response = (session or requests).get(image_url, timeout=30)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise GalleryError(f"Could not fetch image: {e}") from e
    return response.content


def download_filename(prefix: str = "learnx-image") -> str:
    return f"{prefix}-{int(time.time() * 1000)}.png"


def format_created_at(record: GeneratedImageRecord) -> str:
    return record.created_at.strftime("%b %d, %Y, %I:%M %p")
