"""Generative engines that answer prompts, optionally about an audio clip."""

import asyncio
import logging
from typing import Optional, Protocol

import aiohttp

from ..audio.encoder import DATA_URI_PATTERN
from ..exceptions import EngineError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GenerativeEngine(Protocol):
    """Protocol for engines that turn a prompt (plus optional audio) into text."""

    async def generate(self, prompt: str, audio: Optional[str] = None) -> str:
        """Send a prompt, with an optional audio data URI, and return the reply text."""
        ...


class GeminiEngine:
    """Engine backed by the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        timeout_seconds: float = 60.0,
        temperature: float = 0.2,
        base_url: str = GEMINI_BASE_URL,
    ):
        """Initialize Gemini engine.

        Args:
            api_key: Gemini API key
            model: Model name, e.g. ``gemini-1.5-flash``
            timeout_seconds: Total timeout for one request
            temperature: Sampling temperature
            base_url: Models endpoint root
        """
        self.api_key = api_key
        self.model = model
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.temperature = temperature
        self.url = f"{base_url}/{model}:generateContent"

        logger.info(f"GeminiEngine initialized with model: {model}")

    def build_request(self, prompt: str, audio: Optional[str] = None) -> dict:
        parts = [{"text": prompt}]
        if audio is not None:
            match = DATA_URI_PATTERN.match(audio)
            if not match:
                raise EngineError("Audio must be a base64 data URI")
            parts.append({
                "inline_data": {
                    "mime_type": match.group("mime").split(";")[0],
                    "data": match.group("data"),
                }
            })
        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "temperature": self.temperature,
                "responseMimeType": "application/json",
            },
        }

    async def generate(self, prompt: str, audio: Optional[str] = None) -> str:
        """Send a prompt to Gemini and get the response text.

        Raises:
            EngineError: If the request fails or the reply carries no text
        """
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        data = self.build_request(prompt, audio)

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.url, headers=headers, json=data) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise EngineError(f"Gemini API error: {response.status} - {error_text}", status=response.status)
                    result = await response.json()
        except aiohttp.ClientError as e:
            raise EngineError(f"Gemini request failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise EngineError("Gemini request timed out") from e

        return extract_text(result)


def extract_text(result: dict) -> str:
    """Concatenate the text parts of the first candidate."""
    try:
        parts = result["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as e:
        reason = result.get("promptFeedback", {}).get("blockReason") if isinstance(result, dict) else None
        raise EngineError(f"Gemini returned no content (block reason: {reason})") from e
    text = "".join(part.get("text", "") for part in parts)
    if not text.strip():
        raise EngineError("Gemini returned an empty reply")
    return text.strip()
