# ------------------------------------------------------------
# Module: lmstudio_backend/utils/logging_extras.py
# Purpose: Provide a helper for contextual logging with correlation IDs.
# ------------------------------------------------------------

"""Utility for creating logger adapters that attach contextual identifiers.

Notes
-----
- Use this helper when logs need to be correlated per generation call.
- When `cid` is None, the adapter adds no extra metadata.
- Per-call `extra=` fields are merged with the adapter's own; the stock
  `LoggerAdapter` (before Python 3.13) would drop them.
"""

import logging


class _MergingAdapter(logging.LoggerAdapter):
    """`LoggerAdapter` that keeps the caller's `extra` alongside its own."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def log_adapter(logger: logging.Logger, cid: str | None) -> logging.LoggerAdapter:
    """Return a `LoggerAdapter` that injects an optional correlation ID.

    Parameters
    ----------
    logger : logging.Logger
        The base logger to wrap.
    cid : str | None
        Correlation or context ID (e.g., a conversation turn). If None, no extra field is added.

    Example
    -------
    >>> log = log_adapter(logging.getLogger(__name__), cid="turn-7")
    >>> log.info("lmstudio.call", extra={"model": "m"})
    # emits a record carrying both `cid` and `model`
    """
    return _MergingAdapter(logger, {"cid": cid} if cid else {})
