"""Text-to-speech synthesis for the audio page."""

import asyncio
import io

import edge_tts

from learnx.core.config import get_speech_voice
from learnx.core.errors import LearnXError


class SpeechSynthesisError(LearnXError):
    """Raised when the speech service fails to produce audio."""

    pass


def _percent(multiplier: float) -> str:
    return f"{round((multiplier - 1) * 100):+d}%"


def _hertz(multiplier: float) -> str:
    return f"{round((multiplier - 1) * 50):+d}Hz"


async def _synthesize(text: str, voice: str, rate: str, pitch: str, volume: str) -> bytes:
    communicate = edge_tts.Communicate(text, voice, rate=rate, pitch=pitch, volume=volume)
    buffer = io.BytesIO()
    async for chunk in communicate.stream():
        if chunk["type"] == "audio":
            buffer.write(chunk["data"])
    return buffer.getvalue()


def synthesize_speech(
    text: str,
    voice: str | None = None,
    rate: float = 1.0,
    pitch: float = 1.0,
    volume: float = 1.0,
) -> bytes:
    """Synthesize text into MP3 bytes.

    rate, pitch and volume are multipliers where 1.0 is the voice default.
    """
    try:
        audio = asyncio.run(
            _synthesize(
                text,
                voice or get_speech_voice(),
                rate=_percent(rate),
                pitch=_hertz(pitch),
                volume=_percent(volume),
            )
        )
    except Exception as e:
        raise SpeechSynthesisError(f"Speech synthesis failed: {e}") from e

    if not audio:
        raise SpeechSynthesisError("Speech synthesis returned no audio")
    return audio
