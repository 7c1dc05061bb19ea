# ------------------------------------------------------------
# Module: lmstudio_backend/cli.py
# Purpose: CLI to send one prompt to LM Studio and print the reply as it streams.
# ------------------------------------------------------------

from __future__ import annotations

import argparse
import sys

from pydantic import ValidationError

from lmstudio_backend.core.config import settings_from_env
from lmstudio_backend.core.logging import configure_logging
from lmstudio_backend.llm.lmstudio import make_backend_lmstudio
from lmstudio_backend.llm.types import Token


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="lmstudio-chat",
        description="Send a prompt to an LM Studio server and print the reply.",
    )
    ap.add_argument("prompt", help="User prompt text.")
    ap.add_argument("--url", help="Server base URL (e.g. http://localhost:1234/v1).")
    ap.add_argument("--model", help="Model id as listed by the server.")
    ap.add_argument("--api-key", help="Bearer token sent in the Authorization header.")
    ap.add_argument("--system", help="Optional system prompt.")
    ap.add_argument("--max-tokens", type=int)
    ap.add_argument("--temperature", type=float)
    ap.add_argument("--seed", type=int, help="Negative means unseeded (overrides LLM_SEED).")
    ap.add_argument(
        "--stop", action="append", help="Stop sequence (repeat for several)."
    )
    ap.add_argument("--timeout-ms", type=int)
    ap.add_argument(
        "--no-stream",
        action="store_true",
        help="Wait for the full reply instead of streaming SSE deltas.",
    )
    ap.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )
    ap.add_argument("--env-file", help="Path to a .env file (default: search cwd).")
    return ap


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    # Flags left unset pass through as None and keep env/default values.
    try:
        cfg = settings_from_env(
            args.env_file,
            LMSTUDIO_URL=args.url,
            LMSTUDIO_MODEL=args.model,
            LMSTUDIO_API_KEY=args.api_key,
            LMSTUDIO_TIMEOUT_MS=args.timeout_ms,
            LMSTUDIO_STREAM=False if args.no_stream else None,
            LLM_SYSTEM_PROMPT=args.system,
            LLM_MAX_TOKENS=args.max_tokens,
            LLM_TEMP=args.temperature,
            LLM_SEED=args.seed,
            LLM_STOP=args.stop,
            LOG_LEVEL=args.log_level,
        )
    except ValidationError as e:
        ap.error(f"invalid configuration: {e}")

    configure_logging(cfg, stream=sys.stderr)

    backend = make_backend_lmstudio(cfg.lmstudio_opts())
    if not backend.init():
        print("backend init failed", file=sys.stderr)
        return 1

    wrote_text = False

    def on_token(tok: Token) -> None:
        nonlocal wrote_text
        if tok.is_error:
            print(tok.text, file=sys.stderr)
        elif tok.is_final:
            if wrote_text:
                sys.stdout.write("\n")
            sys.stdout.flush()
        else:
            sys.stdout.write(tok.text)
            sys.stdout.flush()
            wrote_text = True

    try:
        ok = backend.generate(args.prompt, cfg.generate_params(), on_token)
    finally:
        backend.shutdown()
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
