# ------------------------------------------------------------
# Module: lmstudio_backend/llm/request.py
# Purpose: Build the endpoint, headers and JSON body of a chat-completion request.
# ------------------------------------------------------------

"""Request construction for OpenAI-compatible `/chat/completions` servers.

Notes
-----
- Pure functions; no I/O. The transport lives in `lmstudio.py`.
- Key order in the body is stable so request logs diff cleanly.
"""

from __future__ import annotations

from lmstudio_backend.llm.types import GenerateParams


def chat_completions_url(base_url: str) -> str:
    """Return `<base>/chat/completions`, tolerating one trailing slash on `base`."""
    endpoint = base_url
    if endpoint.endswith("/"):
        endpoint = endpoint[:-1]
    return endpoint + "/chat/completions"


def build_headers(api_key: str) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }


def build_messages(prompt: str, system_prompt: str = "") -> list[dict[str, str]]:
    """System message (only when non-empty) followed by the user prompt."""
    msgs: list[dict[str, str]] = []
    if system_prompt:
        msgs.append({"role": "system", "content": system_prompt})
    msgs.append({"role": "user", "content": prompt})
    return msgs


def build_payload(model_id: str, prompt: str, p: GenerateParams) -> dict:
    """Map sampling params 1:1 onto the chat-completion JSON body.

    Notes
    -----
    - `seed` is omitted when negative; `stop` is omitted when empty.
    """
    body: dict = {
        "model": model_id,
        "stream": p.stream,
        "max_tokens": p.max_tokens,
        "temperature": p.temperature,
        "top_p": p.top_p,
        "top_k": p.top_k,
        "min_p": p.min_p,
    }
    if p.seed >= 0:
        body["seed"] = p.seed
    if p.stop:
        body["stop"] = list(p.stop)
    body["messages"] = build_messages(prompt, p.system_prompt)
    return body
