"""Adapter for OpenAI-compatible local inference servers (LM Studio)."""

from lmstudio_backend.llm.lmstudio import LMStudioBackend, make_backend_lmstudio
from lmstudio_backend.llm.protocols import LLMBackend
from lmstudio_backend.llm.types import GenerateParams, LMStudioOpts, Token

__version__ = "0.1.0"

__all__ = [
    "GenerateParams",
    "LLMBackend",
    "LMStudioBackend",
    "LMStudioOpts",
    "Token",
    "make_backend_lmstudio",
]
