"""Image Generation Providers

Two interchangeable clients behind a single interface:

  generate(prompt, context_id) -> image bytes, or None on failure

Provider errors never escape ``generate``: rate limits are retried in a
bounded loop after a fixed cooldown, and anything else is logged and
reported as None so the orchestrator can record a failed job and move on.

Providers:
  - openai: DALL-E 3, URL response downloaded separately; one retry with a
    generic prompt after a content-policy rejection
  - gemini: Gemini image generation, image bytes returned inline
"""

import base64
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import openai
import requests
from google import genai
from google.genai import types
from openai import OpenAI

from .config import Settings, require_credentials
from .prompts import fallback_prompt

logger = logging.getLogger(__name__)

RATE_LIMIT_COOLDOWN_SECONDS = 30
DEFAULT_MAX_ATTEMPTS = 3
DOWNLOAD_TIMEOUT_SECONDS = 60

OPENAI_IMAGE_MODEL = "dall-e-3"
OPENAI_IMAGE_SIZE = "1792x1024"
GEMINI_IMAGE_MODEL = "gemini-2.0-flash-preview-image-generation"


class RateLimitedError(Exception):
    """Provider asked us to slow down; retried after the cooldown."""


class ImageProvider(ABC):
    """Common retry loop shared by every provider."""

    name: str = "base"
    # Pause between consecutive jobs to stay under the provider's rate limit
    delay_seconds: float = 0.0

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        cooldown_seconds: float = RATE_LIMIT_COOLDOWN_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.cooldown_seconds = cooldown_seconds
        self.sleep = sleep

    @abstractmethod
    def _generate_once(self, prompt: str, context_id: str) -> Optional[bytes]:
        """Single request; raise RateLimitedError when throttled."""

    def generate(self, prompt: str, context_id: str) -> Optional[bytes]:
        attempt = 0
        while True:
            attempt += 1
            try:
                return self._generate_once(prompt, context_id)
            except RateLimitedError as e:
                if attempt >= self.max_attempts:
                    logger.error(
                        "[%s] Rate limited on %s, giving up after %d attempts: %s",
                        self.name,
                        context_id,
                        attempt,
                        e,
                    )
                    return None
                logger.warning(
                    "[%s] Rate limited on %s (attempt %d/%d). Waiting %ss before retry",
                    self.name,
                    context_id,
                    attempt,
                    self.max_attempts,
                    self.cooldown_seconds,
                )
                self.sleep(self.cooldown_seconds)
            except Exception as e:
                logger.error("[%s] Error generating %s: %s", self.name, context_id, e)
                return None


def _is_content_policy_violation(exc: Exception) -> bool:
    return getattr(exc, "code", None) == "content_policy_violation"


class OpenAIImageProvider(ImageProvider):
    name = "openai"
    delay_seconds = 13.0  # DALL-E 3 tier 1: 5 images/min

    def __init__(
        self,
        client: Any = None,
        api_key: Optional[str] = None,
        http: Any = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.client = client if client is not None else OpenAI(api_key=api_key)
        self.http = http if http is not None else requests.Session()

    def _request_image_url(self, prompt: str) -> Optional[str]:
        response = self.client.images.generate(
            model=OPENAI_IMAGE_MODEL,
            prompt=prompt,
            size=OPENAI_IMAGE_SIZE,
            quality="standard",
            style="natural",
            response_format="url",
            n=1,
        )
        if not response.data:
            return None
        return response.data[0].url

    def _download(self, url: str) -> bytes:
        resp = self.http.get(url, timeout=DOWNLOAD_TIMEOUT_SECONDS)
        resp.raise_for_status()
        return resp.content

    def _generate_once(self, prompt: str, context_id: str) -> Optional[bytes]:
        try:
            url = self._request_image_url(prompt)
        except openai.RateLimitError as e:
            raise RateLimitedError(str(e)) from e
        except openai.BadRequestError as e:
            if not _is_content_policy_violation(e):
                raise
            logger.warning("[openai] Content policy rejection for %s; retrying with generic prompt", context_id)
            try:
                url = self._request_image_url(fallback_prompt(context_id))
            except openai.RateLimitError as retry_error:
                raise RateLimitedError(str(retry_error)) from retry_error

        if not url:
            logger.error("[openai] No image URL returned for %s", context_id)
            return None
        return self._download(url)


def _is_gemini_rate_limit(exc: Exception) -> bool:
    code = getattr(exc, "code", None) or getattr(exc, "status_code", None)
    return code == 429 or "quota" in str(exc).lower()


class GeminiImageProvider(ImageProvider):
    name = "gemini"
    delay_seconds = 6.0  # ~10 images/min

    def __init__(self, client: Any = None, api_key: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.client = client if client is not None else genai.Client(api_key=api_key)

    def _generate_once(self, prompt: str, context_id: str) -> Optional[bytes]:
        try:
            response = self.client.models.generate_content(
                model=GEMINI_IMAGE_MODEL,
                contents=prompt,
                config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
            )
        except Exception as e:
            if _is_gemini_rate_limit(e):
                raise RateLimitedError(str(e)) from e
            raise

        candidates = getattr(response, "candidates", None) or []
        parts = []
        if candidates and candidates[0].content is not None:
            parts = candidates[0].content.parts or []

        for part in parts:
            inline = getattr(part, "inline_data", None)
            data = getattr(inline, "data", None) if inline is not None else None
            if data:
                if isinstance(data, str):
                    return base64.b64decode(data)
                return bytes(data)

        logger.error("[gemini] No image in response for %s", context_id)
        return None


def create_provider(
    name: str,
    settings: Settings,
    sleep: Callable[[float], None] = time.sleep,
) -> ImageProvider:
    """Build the named provider; raises ConfigurationError without credentials."""
    api_key = require_credentials(name, settings)
    if name == "openai":
        return OpenAIImageProvider(api_key=api_key, max_attempts=settings.max_attempts, sleep=sleep)
    return GeminiImageProvider(api_key=api_key, max_attempts=settings.max_attempts, sleep=sleep)
