"""
Shopbot - Centralized Configuration
====================================
Uses ``pydantic-settings`` (``BaseSettings``) to load *all* configuration
from environment variables and the project-level ``.env`` file.

Security
--------
- ``OPENROUTER_API_KEY`` is typed as ``SecretStr``.  It is *optional* at
  startup: a missing key does not stop the process, but every ``/chat``
  request fails fast with a configuration error before any upstream
  call is attempted.  The raw value is never exposed in repr, logs,
  or tracebacks.

Paths
-----
All filesystem paths are ``Path.resolve()``-d at class level so they
work identically on Windows, WSL, and Linux.

Reload
------
``KB_RELOAD_MODE`` selects exactly one reload trigger per deployment:
``"request"`` checks the knowledge file's mtime on every chat request,
``"watch"`` runs a background directory watcher with debounce.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings.

    Every field is loaded from environment variables (or ``.env``).

    Attributes
    ----------
    OPENROUTER_API_KEY : SecretStr | None
        Credential for the upstream OpenAI-compatible API.
        Access the raw value with ``settings.OPENROUTER_API_KEY.get_secret_value()``.
    ENV : Literal["dev", "prod"]
        Environment mode controlling logging verbosity.
    LOG_LEVEL : str | None
        Explicit log level; overrides the ENV-derived default.
    KB_PATH : Path
        Markdown knowledge file (``# Heading`` delimited sections).
    KB_RELOAD_MODE : Literal["request", "watch"]
        Reload trigger (see module docstring).
    RETRIEVAL_STRATEGY : Literal["embedding", "lexical"]
        Vector-similarity retrieval or heading/token-overlap retrieval.
    EMBEDDING_THRESHOLD : float
        Cosine score a chunk must strictly exceed to be used as context.
    CONTEXT_MAX_CHARS : int
        Character budget of a strict-mode context window.
    GENERAL_CONTEXT_MAX_CHARS : int
        Character budget of the whole-document view in general mode.
    """

    # ── Resolved Absolute Paths ────────────────────────────────────────
    BASE_DIR: Path = Path(__file__).resolve().parent.parent
    KB_PATH: Path = BASE_DIR / "data" / "kb" / "restaurant.md"
    IMAGES_DIR: Path = BASE_DIR / "data" / "images"

    # ── Environment Mode ───────────────────────────────────────────────
    ENV: Literal["dev", "prod"] = "dev"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None

    # ── API Keys (checked per request, not at startup) ─────────────────
    OPENROUTER_API_KEY: SecretStr | None = None

    # ── Upstream Model Configuration ───────────────────────────────────
    UPSTREAM_BASE_URL: str = "https://openrouter.ai/api/v1"
    CHAT_MODEL: str = "openai/gpt-4o-mini"
    EMBEDDING_MODEL: str = "openai/text-embedding-3-small"
    UPSTREAM_TIMEOUT: float = 60.0
    MAX_TOKENS: int = 400
    GENERAL_TEMPERATURE: float = 0.7
    APP_TITLE: str = "Shop Chatbot"

    # ── Knowledge Base ─────────────────────────────────────────────────
    KB_RELOAD_MODE: Literal["request", "watch"] = "request"
    KB_WATCH_DEBOUNCE_MS: int = 300

    # ── Retrieval Parameters ───────────────────────────────────────────
    RETRIEVAL_STRATEGY: Literal["embedding", "lexical"] = "embedding"
    EMBEDDING_THRESHOLD: float = 0.75
    EMBEDDING_TOP_K: int = 4
    CONTEXT_MAX_CHARS: int = 3000
    GENERAL_CONTEXT_MAX_CHARS: int = 6000

    # ── HTTP Surface ───────────────────────────────────────────────────
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    ALLOWED_ORIGINS: str = ""
    IMAGES_URL_PREFIX: str = "/images"

    # ── Validators ─────────────────────────────────────────────────────

    @field_validator("EMBEDDING_THRESHOLD")
    @classmethod
    def _threshold_range(cls, v: float) -> float:
        if not -1.0 <= v < 1.0:
            raise ValueError(f"EMBEDDING_THRESHOLD must be in [-1, 1), got {v}")
        return v


    @field_validator("EMBEDDING_TOP_K")
    @classmethod
    def _top_k_range(cls, v: int) -> int:
        if not 1 <= v <= 20:
            raise ValueError(f"EMBEDDING_TOP_K must be 1–20, got {v}")
        return v


    @field_validator("CONTEXT_MAX_CHARS", "GENERAL_CONTEXT_MAX_CHARS")
    @classmethod
    def _budget_positive(cls, v: int) -> int:
        if v < 200:
            raise ValueError(f"context budget must be ≥ 200 chars, got {v}")
        return v


    @field_validator("UPSTREAM_TIMEOUT")
    @classmethod
    def _timeout_range(cls, v: float) -> float:
        if not 1.0 <= v <= 300.0:
            raise ValueError(f"UPSTREAM_TIMEOUT must be 1–300 seconds, got {v}")
        return v

    # ── Derived Values ─────────────────────────────────────────────────

    @property
    def allowed_origins(self) -> list[str]:
        """``ALLOWED_ORIGINS`` split on commas, blanks dropped."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


    @property
    def has_api_key(self) -> bool:
        return self.OPENROUTER_API_KEY is not None and bool(self.OPENROUTER_API_KEY.get_secret_value().strip())

    # ── Pydantic Settings Configuration ────────────────────────────────
    model_config = SettingsConfigDict(env_file=Path(__file__).resolve().parent.parent / ".env", env_file_encoding="utf-8", extra="ignore")


# ── Singleton Instance ─────────────────────────────────────────────────
# Import this throughout the project:
#     from shopbot.config.settings import settings
settings = Settings()
