from __future__ import annotations

import json
import logging
from pathlib import Path

from werkzeug.security import generate_password_hash

from app.spahtmx.domain import Prize, User, prize_from_json
from app.spahtmx.errors import NotFoundError
from app.spahtmx.repositories import PrizeRepository, UserRepository

logger = logging.getLogger(__name__)

SEED_PASSWORD = "password"

# (username, email, active)
SEED_USERS = (
    ("alice", "alice@fake.com", True),
    ("bob", "bob@fake.com", False),
    ("charlie", "charlie@fake.com", True),
)


def load_prizes(path: str | Path) -> list[Prize]:
    """Read a Nobel Prize API (v1) dump: ``{"prizes": [...]}``."""
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    return [prize_from_json(p) for p in data.get("prizes") or []]


def seed_users(repo: UserRepository) -> int:
    """Create the demo users that don't exist yet. Existing users are left alone."""
    password_hash = generate_password_hash(SEED_PASSWORD)
    created = 0
    for username, email, active in SEED_USERS:
        try:
            repo.get_by_username(username)
            continue
        except NotFoundError:
            pass
        repo.create_user(User(id="", username=username, email=email, status=active, password_hash=password_hash))
        created += 1
    logger.info("Seeded %d user(s)", created)
    return created


def seed_prizes(repo: PrizeRepository, path: str | Path) -> int:
    """Insert the prize fixture into an empty prize store."""
    if repo.get_years():
        logger.info("Prize store already populated; skipping prize seed")
        return 0
    prizes = load_prizes(path)
    logger.info("Loaded %d prizes from %s", len(prizes), path)
    inserted = repo.insert_prizes(prizes)
    logger.info("Inserted %d prizes", inserted)
    return inserted


def seed_database(users: UserRepository, prizes: PrizeRepository, prize_path: str | Path) -> None:
    seed_users(users)
    seed_prizes(prizes, prize_path)
