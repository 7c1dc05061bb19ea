# ------------------------------------------------------------
# Module: lmstudio_backend/llm/types.py
# Purpose: Value types shared by backends: sampling params, backend options, tokens.
# ------------------------------------------------------------

"""Value types for LLM backends.

Responsibilities
----------------
- `GenerateParams`: immutable per-call sampling configuration.
- `LMStudioOpts`: static per-backend connection options.
- `Token`: one fragment of generated text, or the terminal sentinel.

Notes
-----
- Pydantic models are frozen; build a new one with `model_copy(update=...)`.
- `seed < 0` means "unset" and is left out of the request body.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class GenerateParams(BaseModel):
    """Sampling configuration for a single `generate` call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_tokens: int = Field(256, ge=1)
    temperature: float = Field(0.7, ge=0.0)
    top_k: int = Field(40, ge=0)
    top_p: float = Field(0.95, ge=0.0, le=1.0)
    min_p: float = Field(0.05, ge=0.0, le=1.0)
    seed: int = -1
    stream: bool = True
    system_prompt: str = ""
    # OpenAI-compatible stop sequences
    stop: list[str] = Field(default_factory=list)


class LMStudioOpts(BaseModel):
    """Connection options fixed at backend construction."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = "http://localhost:1234/v1"
    api_key: str = "lm-studio"
    model_id: str = ""
    timeout_ms: int = Field(60000, ge=1)
    stream: bool = True


@dataclass(frozen=True)
class Token:
    """A generated text fragment.

    `is_final` tokens carry no text and close the stream; `is_error` tokens carry
    a human-readable failure message instead of model output.
    """

    text: str = ""
    is_final: bool = False
    is_error: bool = False


FINAL = Token("", True)
