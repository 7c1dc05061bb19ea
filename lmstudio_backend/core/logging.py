# ------------------------------------------------------------
# Module: lmstudio_backend/core/logging.py
# Purpose: Centralized, stdout-based logging setup for the backend and its CLI.
# ------------------------------------------------------------

"""Configure unified, stdout-based logging.

Developer Guidance
------------------
- Call `configure_logging()` once at process startup (see `cli.py`).
- Library modules only ever do `logging.getLogger(__name__)`.
- Set `MUTE_ALL_LOGS=True` to silence everything (CI, benchmarks).
"""

import logging
import sys
from typing import TextIO

from lmstudio_backend.core.config import Settings
from lmstudio_backend.core.config import settings as _settings


def configure_logging(
    settings: Settings = _settings, stream: TextIO | None = None
) -> None:
    """Initialize global logging once at startup.

    Notes
    -----
    - Logs go to stdout unless `stream` is given (the CLI passes stderr so
      generated text and logs stay separable).
    - Hard-mutes all logs if `MUTE_ALL_LOGS` is set.
    - `urllib3` is held at WARNING unless DEBUG is requested; its per-connection
      lines drown out the backend's own events otherwise.
    """
    if settings.MUTE_ALL_LOGS:
        logging.disable(logging.CRITICAL)
        return

    logging.basicConfig(
        level=settings.LOG_LEVEL,  # e.g. "INFO", "DEBUG", "ERROR"
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=stream or sys.stdout,
    )

    if settings.LOG_LEVEL != "DEBUG":
        logging.getLogger("urllib3").setLevel(logging.WARNING)
