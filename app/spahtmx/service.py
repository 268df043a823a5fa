from __future__ import annotations

import logging
from dataclasses import dataclass

from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from app.spahtmx.domain import Prize, User
from app.spahtmx.errors import InvalidInputError, NotFoundError, UnauthorizedError
from app.spahtmx.repositories import PrizeRepository, UserRepository

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, repo: UserRepository) -> None:
        self.repo = repo

    def get_users(self) -> list[User]:
        return self.repo.get_users()

    def get_user(self, user_id: str) -> User:
        return self.repo.get_user(user_id)

    def count_users(self) -> int:
        return self.repo.count_users()

    def create_user(self, user: User) -> User:
        return self.repo.create_user(user)

    def update_user_status(self, user_id: str) -> User:
        """Toggle the active flag of a user and return the updated record."""
        if not (user_id or "").strip():
            raise InvalidInputError("user id is required")
        user = self.repo.update_user_status(user_id)
        logger.info("User %s (%s) status -> %s", user.id, user.username, "active" if user.status else "inactive")
        return user


class PrizeService:
    def __init__(self, repo: PrizeRepository) -> None:
        self.repo = repo

    def get_prizes(self) -> list[Prize]:
        return self.repo.get_prizes()

    def get_prize(self, prize_id: str) -> Prize:
        return self.repo.get_prize(prize_id)

    def get_prizes_by_year(self, year: str) -> list[Prize]:
        return self.repo.get_prizes_by_year(year)

    def get_prizes_by_category(self, category: str) -> list[Prize]:
        return self.repo.get_prizes_by_category(category)

    def get_prizes_by_category_and_year(self, category: str, year: str) -> list[Prize]:
        return self.repo.get_prizes_by_category_and_year(category, year)

    def get_categories(self) -> list[str]:
        return self.repo.get_categories()

    def get_years(self) -> list[str]:
        return self.repo.get_years()

    def find_prizes(self, category: str | None = None, year: str | None = None) -> list[Prize]:
        """Apply whichever filters are non-blank."""
        category = (category or "").strip()
        year = (year or "").strip()
        if category and year:
            return self.get_prizes_by_category_and_year(category, year)
        if category:
            return self.get_prizes_by_category(category)
        if year:
            return self.get_prizes_by_year(year)
        return self.get_prizes()


class AuthService:
    def __init__(self, repo: UserRepository) -> None:
        self.repo = repo

    def login(self, username: str, password: str) -> User:
        """
        Return the user matching ``username`` when ``password`` checks out
        against the stored salted hash. Any mismatch is an UnauthorizedError.
        """
        username = (username or "").strip()
        if not username or not password:
            raise UnauthorizedError("missing credentials")
        try:
            user = self.repo.get_by_username(username)
        except NotFoundError as e:
            raise UnauthorizedError(f"unknown user {username!r}") from e
        if not user.password_hash or not check_password_hash(user.password_hash, password):
            raise UnauthorizedError(f"bad password for {username!r}")
        return user

    def current_user(self, username: str | None) -> User | None:
        if not username:
            return None
        try:
            return self.repo.get_by_username(username)
        except NotFoundError:
            return None

    @staticmethod
    def hash_password(password: str) -> str:
        return generate_password_hash(password)


@dataclass(frozen=True)
class Services:
    users: UserService
    prizes: PrizeService
    auth: AuthService


def build_services(users: UserRepository, prizes: PrizeRepository) -> Services:
    return Services(users=UserService(users), prizes=PrizeService(prizes), auth=AuthService(users))


def services() -> Services:
    """Services wired into the current app by create_app()."""
    return current_app.extensions["spahtmx_services"]
