from __future__ import annotations

import logging
from contextlib import contextmanager
from collections.abc import Generator, Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, not_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.spahtmx.db import session_scope
from app.spahtmx.domain import Laureate, Prize, User
from app.spahtmx.errors import InternalError, InvalidInputError, NotFoundError
from app.spahtmx.models import LaureateRecord, PrizeRecord, UserRecord

logger = logging.getLogger(__name__)


def _parse_pk(raw: str, what: str) -> int:
    raw = (raw or "").strip()
    if not raw:
        raise InvalidInputError(f"{what} id is required")
    try:
        return int(raw)
    except ValueError as e:
        raise InvalidInputError(f"invalid {what} id: {raw!r}") from e


def user_to_domain(u: UserRecord) -> User:
    return User(
        id=str(u.id),
        username=u.username,
        email=u.email,
        status=bool(u.status),
        password_hash=u.password,
        created_at=u.created_at,
        updated_at=u.updated_at,
    )


def prize_to_domain(p: PrizeRecord) -> Prize:
    return Prize(
        id=str(p.id),
        year=p.year,
        category=p.category,
        overall_motivation=p.overall_motivation or "",
        laureates=tuple(
            Laureate(firstname=l.firstname, surname=l.surname, motivation=l.motivation, share=l.share)
            for l in p.laureates
        ),
    )


def prize_from_domain(prize: Prize) -> PrizeRecord:
    return PrizeRecord(
        year=prize.year,
        category=prize.category,
        overall_motivation=prize.overall_motivation,
        laureates=[
            LaureateRecord(firstname=l.firstname, surname=l.surname, motivation=l.motivation, share=l.share)
            for l in prize.laureates
        ],
    )


@dataclass(frozen=True)
class _SqlRepository:
    sessionmaker: sessionmaker[Session]

    @contextmanager
    def _unit_of_work(self) -> Generator[Session, None, None]:
        try:
            with session_scope(self.sessionmaker) as s:
                yield s
        except IntegrityError as e:
            raise InvalidInputError(f"constraint violated: {e.orig}") from e
        except SQLAlchemyError as e:
            logger.error("Database error in %s: %s", type(self).__name__, e)
            raise InternalError("database error") from e


class SqlUserRepository(_SqlRepository):
    def get_users(self) -> list[User]:
        with self._unit_of_work() as s:
            rows = s.execute(select(UserRecord).order_by(UserRecord.username.asc())).scalars().all()
            return [user_to_domain(u) for u in rows]

    def get_user(self, user_id: str) -> User:
        pk = _parse_pk(user_id, "user")
        with self._unit_of_work() as s:
            u = s.get(UserRecord, pk)
            if u is None:
                raise NotFoundError(f"user {user_id} not found")
            return user_to_domain(u)

    def get_by_username(self, username: str) -> User:
        with self._unit_of_work() as s:
            u = s.execute(select(UserRecord).where(UserRecord.username == username)).scalar_one_or_none()
            if u is None:
                raise NotFoundError(f"user {username!r} not found")
            return user_to_domain(u)

    def create_user(self, user: User) -> User:
        now = datetime.utcnow()
        with self._unit_of_work() as s:
            u = UserRecord(
                username=user.username,
                password=user.password_hash,
                email=user.email,
                status=user.status,
                created_at=user.created_at or now,
                updated_at=now,
            )
            s.add(u)
            s.flush()
            return user_to_domain(u)

    def update_user(self, user: User) -> None:
        pk = _parse_pk(user.id, "user")
        with self._unit_of_work() as s:
            u = s.get(UserRecord, pk)
            if u is None:
                raise NotFoundError(f"user {user.id} not found")
            u.username = user.username
            u.email = user.email
            u.status = user.status
            if user.password_hash is not None:
                u.password = user.password_hash
            u.updated_at = datetime.utcnow()

    def update_user_status(self, user_id: str) -> User:
        pk = _parse_pk(user_id, "user")
        with self._unit_of_work() as s:
            result = s.execute(
                update(UserRecord)
                .where(UserRecord.id == pk)
                .values(status=not_(UserRecord.status), updated_at=datetime.utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(f"user {user_id} not found")
            u = s.execute(select(UserRecord).where(UserRecord.id == pk)).scalar_one()
            return user_to_domain(u)

    def count_users(self) -> int:
        with self._unit_of_work() as s:
            return int(s.execute(select(func.count(UserRecord.id))).scalar_one())


class SqlPrizeRepository(_SqlRepository):
    def _find(self, *criteria) -> list[Prize]:
        with self._unit_of_work() as s:
            q = select(PrizeRecord).where(*criteria).order_by(
                PrizeRecord.year.desc(), PrizeRecord.category.asc(), PrizeRecord.id.asc()
            )
            return [prize_to_domain(p) for p in s.execute(q).scalars().all()]

    def get_prizes(self) -> list[Prize]:
        return self._find()

    def get_prize(self, prize_id: str) -> Prize:
        pk = _parse_pk(prize_id, "prize")
        with self._unit_of_work() as s:
            p = s.get(PrizeRecord, pk)
            if p is None:
                raise NotFoundError(f"prize {prize_id} not found")
            return prize_to_domain(p)

    def get_prizes_by_year(self, year: str) -> list[Prize]:
        return self._find(PrizeRecord.year == year)

    def get_prizes_by_category(self, category: str) -> list[Prize]:
        return self._find(PrizeRecord.category == category)

    def get_prizes_by_category_and_year(self, category: str, year: str) -> list[Prize]:
        return self._find(PrizeRecord.category == category, PrizeRecord.year == year)

    def get_categories(self) -> list[str]:
        with self._unit_of_work() as s:
            q = select(PrizeRecord.category).distinct().order_by(PrizeRecord.category.asc())
            return list(s.execute(q).scalars().all())

    def get_years(self) -> list[str]:
        with self._unit_of_work() as s:
            q = select(PrizeRecord.year).distinct().order_by(PrizeRecord.year.desc())
            return list(s.execute(q).scalars().all())

    def save_prize(self, prize: Prize) -> Prize:
        with self._unit_of_work() as s:
            p = prize_from_domain(prize)
            s.add(p)
            s.flush()
            return prize_to_domain(p)

    def insert_prizes(self, prizes: Iterable[Prize]) -> int:
        with self._unit_of_work() as s:
            rows = [prize_from_domain(p) for p in prizes]
            s.add_all(rows)
            return len(rows)

    def delete_prize(self, prize_id: str) -> None:
        pk = _parse_pk(prize_id, "prize")
        with self._unit_of_work() as s:
            p = s.get(PrizeRecord, pk)
            if p is None:
                raise NotFoundError(f"prize {prize_id} not found")
            s.delete(p)
