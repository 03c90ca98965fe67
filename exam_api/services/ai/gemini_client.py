"""Minimal client for the Generative Language REST API."""
from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

import requests

from exam_api.config import (
    AI_TIMEOUT_SECONDS,
    GEMINI_API_KEY,
    GEMINI_BASE_URL,
    GEMINI_IMAGE_MODEL,
    GEMINI_TEXT_MODEL,
    GEMINI_TTS_MODEL,
    IMAGEN_MODEL,
)
from exam_api.errors import GenerationError
from exam_api.utils import extract_json_object, parse_data_uri, to_data_uri

log = logging.getLogger(__name__)


def text_part(text: str) -> dict[str, Any]:
    return {"text": text}


def media_part(data_uri: str) -> dict[str, Any]:
    """Inline request part for a `data:` URI (image or audio)."""
    try:
        payload = parse_data_uri(data_uri)
    except ValueError as exc:
        raise GenerationError("The provided media could not be read.") from exc
    return {
        "inlineData": {
            "mimeType": payload.media_type or "application/octet-stream",
            "data": base64.b64encode(payload.data).decode("ascii"),
        }
    }


class GeminiClient:
    """Synchronous wrapper over `models/{model}:generateContent` and `:predict`.

    Every transport error or unusable response raises `GenerationError`.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = GEMINI_BASE_URL,
        timeout: int = AI_TIMEOUT_SECONDS,
    ) -> None:
        self.api_key = api_key or GEMINI_API_KEY
        if not self.api_key:
            raise GenerationError("AI features are not configured (GEMINI_API_KEY is missing).")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"x-goog-api-key": self.api_key})

    def worker_client(self) -> "GeminiClient":
        """Same settings, separate HTTP session; for use from one worker thread."""
        return GeminiClient(self.api_key, base_url=self.base_url, timeout=self.timeout)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "GeminiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _post(self, model: str, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/models/{model}:{method}"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            log.warning("Gemini request to %s failed: %s", model, exc)
            raise GenerationError("The AI service request failed.") from exc
        except ValueError as exc:
            log.warning("Gemini response from %s is not JSON", model)
            raise GenerationError("The AI service returned an invalid response.") from exc
        if not isinstance(data, dict):
            raise GenerationError("The AI service returned an invalid response.")
        return data

    @staticmethod
    def _response_parts(data: dict[str, Any]) -> list[dict[str, Any]]:
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            log.warning("Gemini response has no candidates: %s", str(data)[:200])
            return []
        return [part for part in parts if isinstance(part, dict)]

    def _generate(
        self,
        model: str,
        parts: list[dict[str, Any]],
        generation_config: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        payload: dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if generation_config:
            payload["generationConfig"] = generation_config
        return self._response_parts(self._post(model, "generateContent", payload))

    def generate_text(self, prompt: str | list[dict[str, Any]], *, model: str | None = None) -> str:
        parts = [text_part(prompt)] if isinstance(prompt, str) else prompt
        response_parts = self._generate(model or GEMINI_TEXT_MODEL, parts)
        text = "".join(part.get("text", "") for part in response_parts)
        if not text.strip():
            raise GenerationError("The AI service returned no text.")
        return text

    def generate_json(self, prompt: str, *, model: str | None = None) -> dict[str, Any]:
        response_parts = self._generate(
            model or GEMINI_TEXT_MODEL,
            [text_part(prompt)],
            {"responseMimeType": "application/json"},
        )
        text = "".join(part.get("text", "") for part in response_parts)
        try:
            return extract_json_object(text)
        except ValueError as exc:
            log.warning("Gemini JSON output could not be parsed: %s", text[:200])
            raise GenerationError("The AI service returned malformed output.") from exc

    def generate_image(self, parts: list[dict[str, Any]], *, model: str | None = None) -> str:
        """Image-capable Gemini model; returns the first image as a data URI."""
        response_parts = self._generate(
            model or GEMINI_IMAGE_MODEL,
            parts,
            {"responseModalities": ["TEXT", "IMAGE"]},
        )
        for part in response_parts:
            inline = part.get("inlineData")
            if isinstance(inline, dict) and inline.get("data"):
                mime_type = inline.get("mimeType") or "image/png"
                return f"data:{mime_type};base64,{inline['data']}"
        raise GenerationError("Image generation failed to return an image.")

    def generate_imagen(self, prompt: str, *, model: str | None = None) -> str:
        """Imagen text-to-image; returns a data URI."""
        data = self._post(
            model or IMAGEN_MODEL,
            "predict",
            {"instances": [{"prompt": prompt}], "parameters": {"sampleCount": 1}},
        )
        predictions = data.get("predictions") or []
        if predictions and isinstance(predictions[0], dict):
            encoded = predictions[0].get("bytesBase64Encoded")
            if encoded:
                mime_type = predictions[0].get("mimeType") or "image/png"
                return f"data:{mime_type};base64,{encoded}"
        raise GenerationError("Image generation failed to return an image.")

    def generate_speech(self, script: str, speech_config: dict[str, Any]) -> bytes:
        """Synthesize speech; returns raw PCM samples."""
        response_parts = self._generate(
            GEMINI_TTS_MODEL,
            [text_part(script)],
            {"responseModalities": ["AUDIO"], "speechConfig": speech_config},
        )
        for part in response_parts:
            inline = part.get("inlineData")
            if isinstance(inline, dict) and inline.get("data"):
                try:
                    return base64.b64decode(inline["data"])
                except (binascii.Error, ValueError) as exc:
                    raise GenerationError("Audio generation returned corrupt data.") from exc
        raise GenerationError("Audio generation failed to return audio data.")

    def fetch_as_data_uri(self, url: str) -> str:
        """Download a public image URL and inline it.

        Uses a fresh session so the API key header is not sent to third parties.
        """
        try:
            with requests.Session() as session:
                response = session.get(url, timeout=self.timeout)
                response.raise_for_status()
        except requests.RequestException as exc:
            log.warning("Failed to fetch image %s: %s", url, exc)
            raise GenerationError("Could not process image from URL.") from exc
        content_type = response.headers.get("content-type") or "image/jpeg"
        return to_data_uri(response.content, content_type.split(";")[0].strip())
