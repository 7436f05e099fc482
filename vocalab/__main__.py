"""CLI entry point for vocalab.

Usage:
  python -m vocalab serve [--port PORT] [--host HOST]
  python -m vocalab stop
  python -m vocalab restart [--port PORT]
  python -m vocalab status
  python -m vocalab quiz [--mode MODE] [--count N] [--list LIST_ID] [--ai]
  python -m vocalab lookup WORD [WORD ...]
  python -m vocalab stats
"""
from __future__ import annotations

import asyncio
import os
import signal
import sys
from pathlib import Path

PID_FILE = Path(__file__).resolve().parent.parent / ".server.pid"


def main():
    args = sys.argv[1:]
    command = args[0] if args else "serve"

    if command == "serve":
        _serve(args[1:])
    elif command == "stop":
        _stop()
    elif command == "restart":
        _restart(args[1:])
    elif command == "status":
        _status()
    elif command == "quiz":
        _quiz(args[1:])
    elif command == "lookup":
        _lookup(args[1:])
    elif command == "stats":
        _stats()
    else:
        print(f"Unknown command: {command}")
        print("Commands: serve, stop, restart, status, quiz, lookup, stats")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _read_pid() -> int | None:
    """Read PID from file, return None if stale or missing."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        PID_FILE.unlink(missing_ok=True)
        return None


def _stop() -> bool:
    """Stop a running server. Returns True if a server was stopped."""
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return False
    try:
        os.kill(pid, signal.SIGTERM)
        print(f"Stopped server (PID {pid}).")
        PID_FILE.unlink(missing_ok=True)
        return True
    except ProcessLookupError:
        print("Server was not running (stale PID file removed).")
        PID_FILE.unlink(missing_ok=True)
        return False


def _status():
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
    else:
        print(f"Server is running (PID {pid}).")


def _restart(args: list[str]):
    import time
    _stop()
    time.sleep(1)
    _serve(args)


def _serve(args: list[str]):
    import uvicorn

    existing = _read_pid()
    if existing is not None:
        print(f"Server already running (PID {existing}). Use 'restart' or 'stop' first.")
        sys.exit(1)

    port = int(_parse_flag(args, "--port", "8765"))
    host = _parse_flag(args, "--host", "127.0.0.1")
    PID_FILE.write_text(str(os.getpid()))

    print(f"Starting VocaLab on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")
    try:
        uvicorn.run(
            "vocalab.app:app",
            host=host,
            port=port,
            reload=False,
            timeout_graceful_shutdown=5,
        )
    finally:
        PID_FILE.unlink(missing_ok=True)


def _ai_client(settings):
    from vocalab.ai_client import AIGenerationClient, create_llm
    return AIGenerationClient(
        create_llm(settings), settings.ai_models,
        timeout=settings.ai_timeout, temperature=settings.ai_temperature,
    )


def _quiz(args: list[str]):
    from vocalab.config import load_settings
    from vocalab.db import Database
    from vocalab.errors import InsufficientDataError
    from vocalab.question_generator import generate_quiz

    settings = load_settings()
    mode = _parse_flag(args, "--mode", settings.quiz_mode)
    count = int(_parse_flag(args, "--count", str(settings.quiz_count)))
    list_id = _parse_flag(args, "--list", "") or None
    use_ai = "--ai" in args or settings.use_ai_distractors

    db = Database(settings.db_full_path)
    client = None
    if use_ai:
        try:
            client = _ai_client(settings)
        except (ValueError, ImportError) as e:
            print(f"AI distractors unavailable, using random ones: {e}")
    try:
        questions = asyncio.run(generate_quiz(
            db, mode=mode, count=count, use_ai=use_ai, client=client, list_id=list_id,
        ))
    except (InsufficientDataError, ValueError) as e:
        print(e)
        sys.exit(1)
    finally:
        db.close()

    labels = "ABCD"
    for n, q in enumerate(questions, 1):
        print(f"{n}. {q.prompt}")
        for label, option in zip(labels, q.options):
            mark = "*" if option == q.correct_answer else " "
            print(f"   {mark} {label}) {option}")
        print()


def _lookup(args: list[str]):
    from vocalab.config import load_settings
    from vocalab.errors import AIProviderExhaustedError, UnparsableResponse
    from vocalab.lookup import lookup_words

    words = [a for a in args if not a.startswith("--")]
    if not words:
        print("Usage: python -m vocalab lookup WORD [WORD ...]")
        sys.exit(1)

    settings = load_settings()
    client = _ai_client(settings)
    try:
        result = asyncio.run(lookup_words(client, words))
    except AIProviderExhaustedError as e:
        print(f"All AI models failed: {e.last_error}")
        sys.exit(1)
    except UnparsableResponse as e:
        print(f"Could not parse AI response:\n{e.raw}")
        sys.exit(1)

    for info in result.found:
        print(f"{info.word} ({info.part_of_speech})")
        print(f"  {info.meaning}")
        if info.example:
            print(f"  e.g. {info.example}")
    if result.missing:
        print(f"\nNo result for: {', '.join(result.missing)}")


def _stats():
    from vocalab.config import load_settings
    from vocalab.db import Database

    settings = load_settings()
    db = Database(settings.db_full_path)
    stats = db.get_stats()

    print("VocaLab Stats")
    print("=" * 40)
    print(f"Word lists:         {stats['total_lists']}")
    print(f"Total words:        {stats['total_words']}")
    print(f"Words with meaning: {stats['words_with_meaning']}")
    print(f"Stored questions:   {stats['total_questions']}")
    db.close()


if __name__ == "__main__":
    main()
