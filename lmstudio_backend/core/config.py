# ------------------------------------------------------------
# Module: lmstudio_backend/core/config.py
# Purpose: Central, typed settings for the LM Studio backend (code defaults + opt-in env).
# ------------------------------------------------------------

"""Typed configuration hub for the LM Studio backend.

Responsibilities
----------------
- Provide strongly-typed server, sampling, and logging knobs with code defaults.
- Validate sampling ranges up front so bad values never reach the server.
- Derive the per-backend (`LMStudioOpts`) and per-call (`GenerateParams`) models.
- Offer `settings_from_env()` for `.env` / OS environment overrides.

Notes
-----
- Importing this module never reads the environment; only `settings_from_env()` does.
- Extras are forbidden to surface typos/unknown keys early.
"""

from __future__ import annotations

import os
from typing import Literal

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

from lmstudio_backend.llm.types import GenerateParams, LMStudioOpts


class Settings(BaseModel):
    """
    Backend configuration with code-only defaults.

    Notes
    -----
    - Field names double as environment variable names in `settings_from_env`.
    - `LLM_SEED=None` means "no seed" and maps to `seed=-1` on the wire model.
    """

    model_config = dict(extra="forbid")

    # App toggles
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    MUTE_ALL_LOGS: bool = False

    # Server connection
    LMSTUDIO_URL: str = "http://localhost:1234/v1"
    LMSTUDIO_API_KEY: str = "lm-studio"  # LM Studio accepts any key
    LMSTUDIO_MODEL: str = ""
    LMSTUDIO_TIMEOUT_MS: int = Field(60000, ge=1, description="Request timeout")
    LMSTUDIO_STREAM: bool = True

    # ---- Sampling controls (validated to avoid provider 400s) ----
    LLM_MAX_TOKENS: int = Field(256, ge=1, le=32768, description="Max new tokens")
    LLM_TEMP: float = Field(0.7, ge=0.0, le=2.0, description="Sampling temperature")
    LLM_TOP_P: float = Field(0.95, ge=0.0, le=1.0, description="Nucleus sampling")
    LLM_TOP_K: int = Field(40, ge=0, description="Top-K sampling")
    LLM_MIN_P: float = Field(0.05, ge=0.0, le=1.0, description="Min-P sampling")
    LLM_SEED: int | None = Field(
        None, description="Deterministic generations if supported"
    )
    LLM_SYSTEM_PROMPT: str = ""
    LLM_STOP: list[str] = []

    # Accept comma-separated string or list for LLM_STOP; normalize to list[str].
    @field_validator("LLM_STOP", mode="before")
    @classmethod
    def _coerce_stop(cls, v: str | list[str] | None):
        if v is None:
            return []
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    # Empty env values arrive as "" and mean "unset".
    @field_validator("LLM_SEED", mode="before")
    @classmethod
    def _coerce_seed(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def lmstudio_opts(self) -> LMStudioOpts:
        """Static backend options derived from the server fields."""
        return LMStudioOpts(
            url=self.LMSTUDIO_URL,
            api_key=self.LMSTUDIO_API_KEY,
            model_id=self.LMSTUDIO_MODEL,
            timeout_ms=self.LMSTUDIO_TIMEOUT_MS,
            stream=self.LMSTUDIO_STREAM,
        )

    def generate_params(self) -> GenerateParams:
        """Per-call sampling parameters derived from the `LLM_*` fields."""
        return GenerateParams(
            max_tokens=self.LLM_MAX_TOKENS,
            temperature=self.LLM_TEMP,
            top_k=self.LLM_TOP_K,
            top_p=self.LLM_TOP_P,
            min_p=self.LLM_MIN_P,
            seed=-1 if self.LLM_SEED is None else self.LLM_SEED,
            stream=self.LMSTUDIO_STREAM,
            system_prompt=self.LLM_SYSTEM_PROMPT,
            stop=list(self.LLM_STOP),
        )


def settings_from_env(dotenv_path: str | None = None, **overrides) -> Settings:
    """Create a Settings instance from `.env` / OS env, then explicit overrides.

    Notes
    -----
    - Without `dotenv_path`, `.env` is searched from the current working directory upward.
    - `load_dotenv` does not override variables already set in the environment.
    - Overrides whose value is None are ignored so CLI flags can pass through unset.
    - Raises `pydantic.ValidationError` on out-of-range or malformed values.
    """
    load_dotenv(dotenv_path or find_dotenv(usecwd=True))
    data: dict = {
        name: os.environ[name] for name in Settings.model_fields if name in os.environ
    }
    data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings.model_validate(data)


# Eagerly instantiate once at import; code-only defaults.
settings = Settings()
