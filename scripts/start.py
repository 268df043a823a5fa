#!/usr/bin/env python3
"""
Production startup script.

Validates PORT, then replaces this process with gunicorn (os.execvp) so that
gunicorn is PID 1 and receives SIGINT/SIGTERM directly. Gunicorn stops
accepting connections and gives in-flight requests 10 seconds to finish.

Usage:
    python scripts/start.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.spahtmx.config import load_settings

GRACEFUL_TIMEOUT_SECONDS = 10


def gunicorn_argv(port: int, workers: str, threads: str) -> list[str]:
    return [
        "gunicorn",
        "app.wsgi:app",
        "--bind", f"0.0.0.0:{port}",
        "--workers", workers,
        "--threads", threads,
        "--timeout", "60",
        "--graceful-timeout", str(GRACEFUL_TIMEOUT_SECONDS),
        "--access-logfile", "-",
        "--error-logfile", "-",
    ]


def main() -> None:
    load_dotenv()

    # Step 0: Validate PORT environment variable
    if not os.environ.get("PORT", "").strip():
        print("WARNING: PORT not set, using default 8080", flush=True)
    try:
        port = load_settings().port
    except RuntimeError as e:
        print(f"ERROR: {e}", flush=True)
        sys.exit(1)
    if port < 1 or port > 65535:
        print(f"ERROR: Invalid PORT value '{port}'. Must be integer 1-65535.", flush=True)
        sys.exit(1)

    # One worker process by default: SEED_DB runs inside create_app() and must
    # not race with itself. Concurrency comes from threads.
    workers = os.environ.get("WEB_CONCURRENCY", "1").strip() or "1"
    threads = os.environ.get("WEB_THREADS", "8").strip() or "8"

    print(f"=== Starting gunicorn on 0.0.0.0:{port} (workers={workers}, threads={threads}) ===", flush=True)
    os.execvp("gunicorn", gunicorn_argv(port, workers, threads))


if __name__ == "__main__":
    main()
