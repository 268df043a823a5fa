"""
Create the schema (sql backend) and seed demo users + prizes.

Idempotent: existing users are left alone and prizes are only loaded into an
empty store.

Usage:
  python scripts/init_db.py [path/to/nobel-prize.json]
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.spahtmx.config import load_config
from app.spahtmx.logging_config import setup_logging
from app.spahtmx.seed import SEED_PASSWORD, SEED_USERS, seed_database
from app.spahtmx.storage import repositories_from_config


def seed_only(prize_path: str | None = None) -> None:
    config = load_config()
    setup_logging(config["LOG_LEVEL"])
    repos = repositories_from_config(config)
    try:
        seed_database(repos.users, repos.prizes, prize_path or config["PRIZE_SEED_PATH"])
    finally:
        repos.close()

    print(f"Initialized {repos.backend} store (seed_only).")
    print(f"Users: {', '.join(u for u, _, _ in SEED_USERS)} (password: {SEED_PASSWORD})")


def main() -> None:
    load_dotenv()
    seed_only(sys.argv[1] if len(sys.argv) > 1 else None)


if __name__ == "__main__":
    main()
