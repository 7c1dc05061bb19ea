# ------------------------------------------------------------
# Module: lmstudio_backend/llm/lmstudio.py
# Purpose: LM Studio backend: chat-completion over HTTP, blocking or SSE-streamed.
# ------------------------------------------------------------

"""Backend for LM Studio (or any OpenAI-compatible `/chat/completions` server).

Responsibilities
----------------
- Build and POST the chat-completion request with bearer auth and a timeout.
- Decode the reply either as one JSON body or as an SSE stream of deltas.
- Deliver tokens in arrival order, always closing with exactly one final token.
- Turn every failure into an error token instead of raising to the caller.
- Log structured diagnostic and timing information.

Notes
-----
- No retries, no connection pooling; each call opens and closes one response.
- Network calls use `requests`; timeout is `opts.timeout_ms` for the whole call.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator

import requests

from lmstudio_backend.core.config import Settings
from lmstudio_backend.core.config import settings as _settings
from lmstudio_backend.core.errors import (
    ConfigError,
    LMStudioError,
    ResponseParseError,
    TransportError,
)
from lmstudio_backend.llm.protocols import LLMBackend, TokenCallback
from lmstudio_backend.llm.request import (
    build_headers,
    build_payload,
    chat_completions_url,
)
from lmstudio_backend.llm.sse import SseDecoder, extract_message_text
from lmstudio_backend.llm.types import FINAL, GenerateParams, LMStudioOpts, Token
from lmstudio_backend.utils.logging_extras import log_adapter

logger = logging.getLogger(__name__)


def _dur_ms(t0: float) -> int:
    return int((time.perf_counter() - t0) * 1000)


def _raise_for_status(r: requests.Response) -> None:
    """Raise `TransportError` unless the status is 2xx (3xx counts as failure)."""
    if r.status_code // 100 != 2:
        raise TransportError(r.status_code, r.reason or "HTTP error")


class LMStudioBackend:
    """Thin client for LM Studio's OpenAI-compatible chat endpoint.

    Parameters
    ----------
    opts
        Static connection options (URL, API key, model id, timeout, stream default).

    Notes
    -----
    - Stateless across calls apart from the `init`/`shutdown` flag (safe to reuse).
    - `generate` and `stream` never raise for backend failures; they emit an
      `is_error` token followed by the final token.
    """

    name = "LMStudio"

    def __init__(self, opts: LMStudioOpts):
        self.opts = opts
        self._ready = False

    @classmethod
    def from_settings(cls, settings: Settings = _settings) -> LMStudioBackend:
        """Construct a backend from `LMSTUDIO_*` settings."""
        return cls(settings.lmstudio_opts())

    def init(self) -> bool:
        if not self._ready:
            logger.info(
                "lmstudio.init",
                extra={
                    "url": self.opts.url,
                    "model": self.opts.model_id or None,
                    "timeout_ms": self.opts.timeout_ms,
                },
            )
            self._ready = True
        return True

    def shutdown(self) -> None:
        if self._ready:
            logger.info("lmstudio.shutdown")
            self._ready = False

    def generate(
        self,
        prompt: str,
        params: GenerateParams | None,
        on_token: TokenCallback,
        *,
        cid: str | None = None,
    ) -> bool:
        """Deliver every token of `stream()` to `on_token`; return False on failure.

        Notes
        -----
        - `on_token` runs on the calling thread, once per token, in arrival order.
        - Exceptions raised by `on_token` itself propagate to the caller.
        """
        ok = True
        for tok in self.stream(prompt, params, cid=cid):
            if tok.is_error:
                ok = False
            on_token(tok)
        return ok

    def stream(
        self,
        prompt: str,
        params: GenerateParams | None = None,
        *,
        cid: str | None = None,
    ) -> Iterator[Token]:
        """Yield generated tokens; the last yielded token is always final.

        Behavior
        --------
        - `params=None` uses default sampling with `stream=opts.stream`.
        - Missing model id: yields one error token and the final token, no HTTP call.
        - Transport errors, non-2xx replies and unparseable non-stream bodies are
          reported the same way.
        """
        lad = log_adapter(logger, cid)
        p = params if params is not None else GenerateParams(stream=self.opts.stream)
        try:
            if not self.opts.model_id:
                raise ConfigError("[LMStudio] model_id not set")
            if p.stream:
                yield from self._stream_sse(prompt, p, lad)
            else:
                yield from self._complete(prompt, p, lad)
        except LMStudioError as e:
            lad.error(
                "lmstudio.error",
                extra={"kind": type(e).__name__, "error": str(e)[:200]},
            )
            yield Token(str(e), is_error=True)
            yield FINAL

    def _post(self, prompt: str, p: GenerateParams) -> requests.Response:
        try:
            return requests.post(
                chat_completions_url(self.opts.url),
                json=build_payload(self.opts.model_id, prompt, p),
                headers=build_headers(self.opts.api_key),
                timeout=self.opts.timeout_ms / 1000,
                stream=p.stream,
            )
        except requests.RequestException as e:
            raise TransportError(0, str(e)) from e

    def _complete(
        self, prompt: str, p: GenerateParams, lad: logging.LoggerAdapter
    ) -> Iterator[Token]:
        """Blocking call: read the whole JSON body, then emit its text once."""
        t0 = time.perf_counter()
        lad.info("lmstudio.call", extra={"model": self.opts.model_id, "stream": False})
        with self._post(prompt, p) as r:
            lad.info(
                "lmstudio.call.done",
                extra={
                    "model": self.opts.model_id,
                    "status": r.status_code,
                    "dur_ms": _dur_ms(t0),
                },
            )
            _raise_for_status(r)
            # JSONDecodeError and wrong-typed content are both ValueError
            try:
                text = extract_message_text(r.json())
            except ValueError as e:
                raise ResponseParseError("[LMStudio parse error]") from e

        if text:
            yield Token(text)
        yield FINAL

    def _stream_sse(
        self, prompt: str, p: GenerateParams, lad: logging.LoggerAdapter
    ) -> Iterator[Token]:
        """Streaming call: feed raw chunks through `SseDecoder` as they arrive.

        Notes
        -----
        - The final token is yielded only after the response is closed.
        - A stream that ends without `[DONE]` still gets its final token here.
        """
        t0 = time.perf_counter()
        dec = SseDecoder()
        count = 0
        with self._post(prompt, p) as r:
            lad.info(
                "lmstudio.stream.open",
                extra={
                    "model": self.opts.model_id,
                    "status": r.status_code,
                    "dur_ms": _dur_ms(t0),
                },
            )
            _raise_for_status(r)
            try:
                for chunk in r.iter_content(chunk_size=None):
                    for tok in dec.feed(chunk):
                        if tok.is_final:
                            break
                        if count == 0:
                            lad.info(
                                "lmstudio.stream.first_token",
                                extra={
                                    "model": self.opts.model_id,
                                    "dur_ms": _dur_ms(t0),
                                },
                            )
                        count += 1
                        yield tok
                    if dec.done:
                        break
            except requests.RequestException as e:
                raise TransportError(r.status_code, str(e)) from e

        lad.info(
            "lmstudio.stream.done",
            extra={
                "model": self.opts.model_id,
                "tokens": count,
                "done_marker": dec.done,
                "dur_ms": _dur_ms(t0),
            },
        )
        yield FINAL


def make_backend_lmstudio(opts: LMStudioOpts) -> LLMBackend:
    """Factory returning an LM Studio backend behind the `LLMBackend` protocol."""
    return LMStudioBackend(opts)
