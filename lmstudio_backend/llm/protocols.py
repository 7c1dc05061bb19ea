# ------------------------------------------------------------
# Module: lmstudio_backend/llm/protocols.py
# Purpose: Define the minimal protocol every LLM backend implements.
# ------------------------------------------------------------

"""Typed protocol for LLM backend implementations.

Responsibilities
----------------
- Provide the `init` / `shutdown` lifecycle contract.
- Provide `generate(prompt, params, on_token)` for callback delivery.
- Provide `stream(prompt, params)` for iterator delivery of the same tokens.
- Decouple callers from any one provider's HTTP details.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Protocol

from lmstudio_backend.llm.types import GenerateParams, Token

TokenCallback = Callable[[Token], None]


# Protocol describing the required interface for any LLM backend implementation.
class LLMBackend(Protocol):
    # Prepare the backend; return False if it cannot be used.
    def init(self) -> bool: ...

    # Release anything acquired in `init`.
    def shutdown(self) -> None: ...

    # Deliver tokens to `on_token` in arrival order; return success/failure.
    def generate(
        self, prompt: str, params: GenerateParams, on_token: TokenCallback
    ) -> bool: ...

    # Yield tokens in arrival order; the last one is always final.
    def stream(self, prompt: str, params: GenerateParams) -> Iterator[Token]: ...
