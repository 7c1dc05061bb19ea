# ------------------------------------------------------------
# Test: tests/test_request.py
# Purpose: Chat-completion body, headers, and endpoint construction.
# ------------------------------------------------------------

from lmstudio_backend.llm.request import (
    build_headers,
    build_payload,
    chat_completions_url,
)
from lmstudio_backend.llm.types import GenerateParams


def test_default_payload_keys_and_order():
    body = build_payload("qwen2.5-7b-instruct", "hello", GenerateParams())
    assert list(body) == [
        "model",
        "stream",
        "max_tokens",
        "temperature",
        "top_p",
        "top_k",
        "min_p",
        "messages",
    ]
    assert body["model"] == "qwen2.5-7b-instruct"
    assert body["stream"] is True
    assert body["max_tokens"] == 256
    assert body["temperature"] == 0.7
    assert body["top_p"] == 0.95
    assert body["top_k"] == 40
    assert body["min_p"] == 0.05
    assert body["messages"] == [{"role": "user", "content": "hello"}]


def test_seed_omitted_only_when_negative():
    assert "seed" not in build_payload("m", "p", GenerateParams(seed=-1))
    assert build_payload("m", "p", GenerateParams(seed=0))["seed"] == 0
    assert build_payload("m", "p", GenerateParams(seed=42))["seed"] == 42


def test_stop_omitted_when_empty():
    assert "stop" not in build_payload("m", "p", GenerateParams())
    body = build_payload("m", "p", GenerateParams(stop=["</s>", "User:"]))
    assert body["stop"] == ["</s>", "User:"]
    # optional keys land before messages
    assert list(body)[-2:] == ["stop", "messages"]


def test_system_prompt_prefixes_user_message():
    body = build_payload("m", "hi", GenerateParams(system_prompt="Be brief."))
    assert body["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "hi"},
    ]


def test_stream_flag_follows_params():
    assert build_payload("m", "p", GenerateParams(stream=False))["stream"] is False


def test_endpoint_tolerates_trailing_slash():
    assert chat_completions_url("http://localhost:1234/v1") == (
        "http://localhost:1234/v1/chat/completions"
    )
    assert chat_completions_url("http://localhost:1234/v1/") == (
        "http://localhost:1234/v1/chat/completions"
    )


def test_headers_carry_bearer_token():
    assert build_headers("lm-studio") == {
        "Content-Type": "application/json",
        "Authorization": "Bearer lm-studio",
    }
