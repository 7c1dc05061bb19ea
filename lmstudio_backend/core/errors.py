# ------------------------------------------------------------
# Module: lmstudio_backend/core/errors.py
# Purpose: Define typed backend exceptions that are turned into error tokens.
# ------------------------------------------------------------

"""Exception types for the backend layer.

These are raised inside the transport helpers and caught at the single
boundary in `LMStudioBackend.stream`, which reports them as error tokens.
Callers of `generate`/`stream` never see them.

Responsibilities
----------------
- Provide a base `LMStudioError` for catch-all handling.
- Surface missing/invalid configuration as `ConfigError`.
- Surface connection failures and non-2xx replies as `TransportError`.
- Surface undecodable non-streaming bodies as `ResponseParseError`.
"""


class LMStudioError(Exception):
    """Base class for backend failures."""


class ConfigError(LMStudioError):
    """Raised when the backend is not configured well enough to make a call."""


class TransportError(LMStudioError):
    """Raised on connection/timeout failures or a non-2xx HTTP status."""

    def __init__(self, status: int, reason: str):
        super().__init__(f"[LMStudio HTTP {status}] {reason}")
        self.status = status
        self.reason = reason


class ResponseParseError(LMStudioError):
    """Raised when a non-streaming response body is not valid JSON."""
