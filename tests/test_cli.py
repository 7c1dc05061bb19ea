# ------------------------------------------------------------
# Test: tests/test_cli.py
# Purpose: `lmstudio-chat` prints streamed text, reports errors, and sets exit codes.
# ------------------------------------------------------------

from __future__ import annotations

import json

import pytest
from conftest import FakeResponse, sse_event

from lmstudio_backend.cli import main
from lmstudio_backend.core.config import Settings


@pytest.fixture
def argv_base(monkeypatch, tmp_path) -> list[str]:
    for name in Settings.model_fields:
        monkeypatch.delenv(name, raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("", encoding="utf-8")
    return ["--env-file", str(env_file), "--log-level", "WARNING"]


def test_streams_reply_to_stdout(fake_post, capsys, argv_base):
    fake_post.respond(
        FakeResponse(
            chunks=[
                sse_event(delta={"content": "Hello"}),
                sse_event(delta={"content": ", world"}),
                b"data: [DONE]\n\n",
            ]
        )
    )
    code = main(["Say hi", "--model", "qwen2.5-7b-instruct", "--seed", "3", *argv_base])

    assert code == 0
    assert capsys.readouterr().out == "Hello, world\n"
    body = fake_post.calls[0]["json"]
    assert body["seed"] == 3
    assert body["messages"][-1] == {"role": "user", "content": "Say hi"}


def test_no_stream_flag(fake_post, capsys, argv_base):
    fake_post.respond(
        FakeResponse(body=json.dumps({"choices": [{"message": {"content": "done"}}]}))
    )
    code = main(["q", "--model", "m", "--no-stream", "--stop", "###", *argv_base])

    assert code == 0
    assert capsys.readouterr().out == "done\n"
    assert fake_post.calls[0]["json"]["stream"] is False
    assert fake_post.calls[0]["json"]["stop"] == ["###"]


def test_missing_model_exits_nonzero(fake_post, capsys, argv_base):
    code = main(["q", *argv_base])

    assert code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[LMStudio] model_id not set" in captured.err
    assert fake_post.calls == []


def test_invalid_flag_value_is_a_usage_error(capsys, argv_base):
    with pytest.raises(SystemExit) as exc:
        main(["q", "--model", "m", "--temperature", "9", *argv_base])
    assert exc.value.code == 2


def test_negative_seed_flag_clears_env_seed(fake_post, monkeypatch, argv_base):
    monkeypatch.setenv("LLM_SEED", "5")
    fake_post.respond(FakeResponse(chunks=[b"data: [DONE]\n"]))
    code = main(["q", "--model", "m", "--seed", "-1", *argv_base])

    assert code == 0
    assert "seed" not in fake_post.calls[0]["json"]
