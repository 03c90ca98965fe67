"""Audio helpers for speech synthesis output."""
from __future__ import annotations

import io
import wave

from exam_api.config import TTS_CHANNELS, TTS_SAMPLE_RATE, TTS_SAMPLE_WIDTH


def pcm_to_wav(
    pcm: bytes,
    channels: int = TTS_CHANNELS,
    rate: int = TTS_SAMPLE_RATE,
    sample_width: int = TTS_SAMPLE_WIDTH,
) -> bytes:
    """Wrap raw little-endian PCM samples in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as writer:
        writer.setnchannels(channels)
        writer.setsampwidth(sample_width)
        writer.setframerate(rate)
        writer.writeframes(pcm)
    return buffer.getvalue()
