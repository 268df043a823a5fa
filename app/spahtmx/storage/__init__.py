from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from app.spahtmx.repositories import PrizeRepository, UserRepository

logger = logging.getLogger(__name__)

BACKENDS = ("sql", "mongo")


class StorageConfigError(RuntimeError):
    pass


@dataclass
class Repositories:
    backend: str
    users: UserRepository
    prizes: PrizeRepository
    closers: list[Callable[[], None]] = field(default_factory=list)

    def close(self) -> None:
        while self.closers:
            self.closers.pop()()


def _sql_repositories(config: dict) -> Repositories:
    from app.spahtmx.db import create_db_engine, make_sessionmaker
    from app.spahtmx.models import Base
    from app.spahtmx.storage.sql import SqlPrizeRepository, SqlUserRepository

    db_url = (config.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise StorageConfigError("DATABASE_URL is required for the sql backend.")
    engine = create_db_engine(db_url, echo=bool(config.get("DEBUG_SQL")), env=config.get("ENV") or "development")
    # CREATE TABLE IF NOT EXISTS for users/prizes/laureates
    Base.metadata.create_all(bind=engine)
    sm = make_sessionmaker(engine)
    logger.info("Using sql storage backend (%s)", engine.url.render_as_string(hide_password=True))
    return Repositories(
        backend="sql",
        users=SqlUserRepository(sm),
        prizes=SqlPrizeRepository(sm),
        closers=[engine.dispose],
    )


def _mongo_repositories(config: dict) -> Repositories:
    from app.spahtmx.storage import mongo

    url = (config.get("MONGODB_URL") or "").strip()
    if not url:
        raise StorageConfigError("MONGODB_URL is required for the mongo backend.")
    client, db = mongo.connect(url, (config.get("MONGODB_DATABASE") or "test").strip())
    users = mongo.MongoUserRepository(db)
    prizes = mongo.MongoPrizeRepository(db)
    users.ensure_indexes()
    prizes.ensure_indexes()
    logger.info("Using mongo storage backend (database=%s)", db.name)
    return Repositories(backend="mongo", users=users, prizes=prizes, closers=[client.close])


def repositories_from_config(config: dict) -> Repositories:
    backend = (config.get("STORE_BACKEND") or "sql").strip().lower()
    if backend == "mongo":
        return _mongo_repositories(config)
    if backend == "sql":
        return _sql_repositories(config)
    raise StorageConfigError(f"Unknown STORE_BACKEND {backend!r}; expected one of: {', '.join(BACKENDS)}")
