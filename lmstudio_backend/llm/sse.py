# ------------------------------------------------------------
# Module: lmstudio_backend/llm/sse.py
# Purpose: Incrementally decode an OpenAI-style SSE byte stream into text tokens.
# ------------------------------------------------------------

"""Server-Sent Events decoding for chat-completion streams.

Responsibilities
----------------
- Reassemble arbitrarily chunked bytes into `\\n`-terminated lines.
- Interpret `data:` lines: `[DONE]` closes the stream, JSON carries text.
- Extract text from the usual OpenAI-compatible response shapes.
- Skip malformed events without failing the stream.

Notes
-----
- Lines are split on raw bytes before UTF-8 decoding, so a multi-byte character
  split across two chunks still decodes correctly.
- An unterminated trailing line is never dispatched; the backend emits the
  final token itself once the transport completes.
"""

from __future__ import annotations

import json
import logging

from lmstudio_backend.llm.types import FINAL, Token

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_MARKER = "[DONE]"


def _as_text(v) -> str:
    return v if isinstance(v, str) else ""


def _first_choice(obj) -> dict | None:
    """Return `obj["choices"][0]` when the shape allows it, else None."""
    if not isinstance(obj, dict):
        return None
    choices = obj.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    c0 = choices[0]
    return c0 if isinstance(c0, dict) else None


def extract_stream_text(obj) -> str:
    """Text of one streamed event.

    Priority: `delta.content`, then `message.content` (some servers send
    accumulated messages even when streaming), then legacy `text`. The first
    key that exists wins, even if its value is empty.
    """
    c0 = _first_choice(obj)
    if c0 is None:
        return ""
    for key in ("delta", "message"):
        part = c0.get(key)
        if isinstance(part, dict) and "content" in part:
            return _as_text(part["content"])
    return _as_text(c0.get("text"))


def extract_message_text(obj) -> str:
    """Text of a complete (non-streaming) response: `message.content`, else `text`.

    Raises
    ------
    ValueError
        When the chosen field exists but is not a string (e.g. `"content": null`).
    """
    c0 = _first_choice(obj)
    if c0 is None:
        return ""
    msg = c0.get("message")
    if isinstance(msg, dict) and "content" in msg:
        value = msg["content"]
    elif "text" in c0:
        value = c0["text"]
    else:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"expected string content, got {type(value).__name__}")
    return value


def parse_sse_line(line: str) -> Token | None:
    """Map one trimmed SSE line to a token, or None when there is nothing to emit.

    Returns
    -------
    Token | None
        `FINAL` for `data: [DONE]`, a text token for a JSON event carrying
        non-empty text, None for everything else (comments, other fields,
        empty deltas, malformed JSON).
    """
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX) :].strip()
    if payload == DONE_MARKER:
        return FINAL
    try:
        obj = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug("lmstudio.sse.skip", extra={"payload_len": len(payload)})
        return None
    text = extract_stream_text(obj)
    return Token(text) if text else None


class SseDecoder:
    """Line buffer + dispatcher for one streamed response.

    Feed raw chunks as they arrive; each call returns the tokens completed by
    that chunk, in order. Once `[DONE]` has been seen, `done` is True and all
    further input is ignored.
    """

    def __init__(self) -> None:
        self._buf = bytearray()
        self.done = False

    def feed(self, chunk: bytes | str) -> list[Token]:
        if self.done or not chunk:
            return []
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        self._buf += chunk

        out: list[Token] = []
        pos = 0
        while True:
            nl = self._buf.find(b"\n", pos)
            if nl == -1:
                # keep incomplete tail for next chunk
                del self._buf[:pos]
                break
            line = self._buf[pos:nl].decode("utf-8", errors="replace").strip()
            pos = nl + 1
            if not line:
                continue
            tok = parse_sse_line(line)
            if tok is None:
                continue
            out.append(tok)
            if tok.is_final:
                self.done = True
                self._buf.clear()
                break
        return out
