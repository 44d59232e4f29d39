"""Configuration Module

Loads runtime settings for the image pipeline from environment variables,
after reading a ``.env`` file from the working directory if one exists.

Environment variables:
  OPENAI_API_KEY: API key for the DALL-E provider
  GEMINI_API_KEY: API key for the Gemini provider
  CONTENT_DIR: Markdown content root (default: src/content/blog)
  PUBLIC_DIR: Static assets root (default: public)
  PROGRESS_FILE: Progress checkpoint file (default: scripts/blog-images-progress.json)
  MIN_IMAGE_BYTES: Size above which an existing image counts as generated (default: 10000)
  PROVIDER_MAX_ATTEMPTS: Attempts per job under rate limiting (default: 3)
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

PROVIDERS = ("openai", "gemini")


class ConfigurationError(RuntimeError):
    """Raised for startup problems that must abort the run before any job."""


class Settings(BaseModel):
    openai_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    content_dir: Path = Path("src/content/blog")
    public_dir: Path = Path("public")
    progress_file: Path = Path("scripts/blog-images-progress.json")
    min_image_bytes: int = 10_000
    max_attempts: int = 3


def load_settings() -> Settings:
    """Build Settings from the environment (and .env)."""
    load_dotenv(Path(".env"))
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        content_dir=Path(os.getenv("CONTENT_DIR", "src/content/blog")),
        public_dir=Path(os.getenv("PUBLIC_DIR", "public")),
        progress_file=Path(os.getenv("PROGRESS_FILE", "scripts/blog-images-progress.json")),
        min_image_bytes=int(os.getenv("MIN_IMAGE_BYTES", "10000")),
        max_attempts=int(os.getenv("PROVIDER_MAX_ATTEMPTS", "3")),
    )


def resolve_provider(requested: Optional[str], settings: Settings) -> str:
    """Explicit choice wins; otherwise DALL-E when its key is set, else Gemini."""
    if requested:
        if requested not in PROVIDERS:
            raise ConfigurationError(
                f"Unknown provider {requested!r}. Available options: {', '.join(PROVIDERS)}"
            )
        return requested
    return "openai" if settings.openai_api_key else "gemini"


def require_credentials(provider: str, settings: Settings) -> str:
    """Return the API key for ``provider`` or raise ConfigurationError."""
    if provider == "openai":
        key, env_name = settings.openai_api_key, "OPENAI_API_KEY"
    elif provider == "gemini":
        key, env_name = settings.gemini_api_key, "GEMINI_API_KEY"
    else:
        raise ConfigurationError(f"Unknown provider {provider!r}")
    if not key:
        raise ConfigurationError(f"{env_name} not set")
    return key
