"""
MongoDB adapter.

One collection per aggregate: ``users`` and ``prize``. Laureates are embedded
in their prize document, so deleting the prize deletes them.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from collections.abc import Generator, Iterable
from dataclasses import dataclass
from datetime import datetime

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.spahtmx.domain import Laureate, Prize, User
from app.spahtmx.errors import InternalError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
PRIZES_COLLECTION = "prize"

# compare-and-set attempts for a status toggle before giving up
_TOGGLE_ATTEMPTS = 5


def connect(url: str, database: str, *, timeout_ms: int = 5000) -> tuple[MongoClient, Database]:
    client: MongoClient = MongoClient(url, serverSelectionTimeoutMS=timeout_ms)
    client.admin.command("ping")
    return client, client[database]


def _parse_oid(raw: str, what: str) -> ObjectId:
    raw = (raw or "").strip()
    if not raw:
        raise InvalidInputError(f"{what} id is required")
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError) as e:
        raise InvalidInputError(f"invalid {what} id: {raw!r}") from e


def user_to_domain(doc: dict) -> User:
    return User(
        id=str(doc["_id"]),
        username=doc.get("username", ""),
        email=doc.get("email", ""),
        status=bool(doc.get("status", False)),
        password_hash=doc.get("password"),
        created_at=doc.get("created_at"),
        updated_at=doc.get("updated_at"),
    )


def prize_to_domain(doc: dict) -> Prize:
    return Prize(
        id=str(doc["_id"]),
        year=doc.get("year", ""),
        category=doc.get("category", ""),
        overall_motivation=doc.get("overallMotivation", ""),
        laureates=tuple(
            Laureate(
                firstname=l.get("firstname", ""),
                surname=l.get("surname", ""),
                motivation=l.get("motivation", ""),
                share=l.get("share", ""),
            )
            for l in doc.get("laureates") or []
        ),
    )


def prize_to_document(prize: Prize) -> dict:
    doc: dict = {
        "_id": _parse_oid(prize.id, "prize") if prize.id else ObjectId(),
        "year": prize.year,
        "category": prize.category,
        "laureates": [
            {"firstname": l.firstname, "surname": l.surname, "motivation": l.motivation, "share": l.share}
            for l in prize.laureates
        ],
    }
    if prize.overall_motivation:
        doc["overallMotivation"] = prize.overall_motivation
    return doc


@dataclass(frozen=True)
class _MongoRepository:
    db: Database

    @contextmanager
    def _guard(self) -> Generator[None, None, None]:
        try:
            yield
        except DuplicateKeyError as e:
            raise InvalidInputError(f"duplicate key: {e.details}") from e
        except PyMongoError as e:
            logger.error("Database error in %s: %s", type(self).__name__, e)
            raise InternalError("database error") from e


class MongoUserRepository(_MongoRepository):
    @property
    def _col(self):
        return self.db[USERS_COLLECTION]

    def ensure_indexes(self) -> None:
        with self._guard():
            self._col.create_index([("username", ASCENDING)], unique=True)

    def get_users(self) -> list[User]:
        with self._guard():
            return [user_to_domain(d) for d in self._col.find({}).sort("username", ASCENDING)]

    def get_user(self, user_id: str) -> User:
        oid = _parse_oid(user_id, "user")
        with self._guard():
            doc = self._col.find_one({"_id": oid})
        if doc is None:
            raise NotFoundError(f"user {user_id} not found")
        return user_to_domain(doc)

    def get_by_username(self, username: str) -> User:
        with self._guard():
            doc = self._col.find_one({"username": username})
        if doc is None:
            raise NotFoundError(f"user {username!r} not found")
        return user_to_domain(doc)

    def create_user(self, user: User) -> User:
        now = datetime.utcnow()
        doc = {
            "_id": ObjectId(),
            "username": user.username,
            "password": user.password_hash,
            "email": user.email,
            "status": user.status,
            "created_at": user.created_at or now,
            "updated_at": now,
        }
        with self._guard():
            self._col.insert_one(doc)
        return user_to_domain(doc)

    def update_user(self, user: User) -> None:
        oid = _parse_oid(user.id, "user")
        fields = {
            "username": user.username,
            "email": user.email,
            "status": user.status,
            "updated_at": datetime.utcnow(),
        }
        if user.password_hash is not None:
            fields["password"] = user.password_hash
        with self._guard():
            result = self._col.update_one({"_id": oid}, {"$set": fields})
        if result.matched_count == 0:
            raise NotFoundError(f"user {user.id} not found")

    def update_user_status(self, user_id: str) -> User:
        oid = _parse_oid(user_id, "user")
        with self._guard():
            for _ in range(_TOGGLE_ATTEMPTS):
                current = self._col.find_one({"_id": oid}, {"status": 1})
                if current is None:
                    raise NotFoundError(f"user {user_id} not found")
                old = bool(current.get("status", False))
                # a missing or null status reads as inactive, so match it as such
                expected = True if old else {"$ne": True}
                doc = self._col.find_one_and_update(
                    {"_id": oid, "status": expected},
                    {"$set": {"status": not old, "updated_at": datetime.utcnow()}},
                    return_document=ReturnDocument.AFTER,
                )
                if doc is not None:
                    return user_to_domain(doc)
                logger.debug("status toggle for user %s lost a race, retrying", user_id)
        raise InternalError(f"could not toggle status of user {user_id}")

    def count_users(self) -> int:
        with self._guard():
            return int(self._col.count_documents({}))


class MongoPrizeRepository(_MongoRepository):
    _ORDER = [("year", DESCENDING), ("category", ASCENDING), ("_id", ASCENDING)]

    @property
    def _col(self):
        return self.db[PRIZES_COLLECTION]

    def ensure_indexes(self) -> None:
        with self._guard():
            self._col.create_index([("year", ASCENDING)])
            self._col.create_index([("category", ASCENDING)])

    def _find(self, query: dict) -> list[Prize]:
        with self._guard():
            return [prize_to_domain(d) for d in self._col.find(query).sort(self._ORDER)]

    def get_prizes(self) -> list[Prize]:
        return self._find({})

    def get_prize(self, prize_id: str) -> Prize:
        oid = _parse_oid(prize_id, "prize")
        with self._guard():
            doc = self._col.find_one({"_id": oid})
        if doc is None:
            raise NotFoundError(f"prize {prize_id} not found")
        return prize_to_domain(doc)

    def get_prizes_by_year(self, year: str) -> list[Prize]:
        return self._find({"year": year})

    def get_prizes_by_category(self, category: str) -> list[Prize]:
        return self._find({"category": category})

    def get_prizes_by_category_and_year(self, category: str, year: str) -> list[Prize]:
        return self._find({"category": category, "year": year})

    def get_categories(self) -> list[str]:
        with self._guard():
            return sorted(self._col.distinct("category"))

    def get_years(self) -> list[str]:
        with self._guard():
            return sorted(self._col.distinct("year"), reverse=True)

    def save_prize(self, prize: Prize) -> Prize:
        doc = prize_to_document(prize)
        with self._guard():
            self._col.insert_one(doc)
        return prize_to_domain(doc)

    def insert_prizes(self, prizes: Iterable[Prize]) -> int:
        docs = [prize_to_document(p) for p in prizes]
        if not docs:
            return 0
        with self._guard():
            result = self._col.insert_many(docs)
        return len(result.inserted_ids)

    def delete_prize(self, prize_id: str) -> None:
        oid = _parse_oid(prize_id, "prize")
        with self._guard():
            result = self._col.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundError(f"prize {prize_id} not found")
