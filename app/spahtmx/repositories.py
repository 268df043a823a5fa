"""Repository contracts.

Services depend on these Protocols rather than on a concrete store. Each
backend in ``app.spahtmx.storage`` provides one class per contract.

Contract guidelines
-------------------

- Ids are strings at this boundary; each backend parses them into its own key
  type and raises ``InvalidInputError`` when that fails (or the id is empty).
- Missing records raise ``NotFoundError``.
- Driver errors are wrapped in ``InternalError`` with the driver error chained.
"""

from typing import Iterable, Protocol

from app.spahtmx.domain import Prize, User


class UserRepository(Protocol):
    def get_users(self) -> list[User]:
        """Return every user, ordered by username."""
        ...

    def get_user(self, user_id: str) -> User:
        ...

    def get_by_username(self, username: str) -> User:
        ...

    def create_user(self, user: User) -> User:
        """Insert ``user`` (its id is ignored) and return it with the stored id."""
        ...

    def update_user(self, user: User) -> None:
        ...

    def update_user_status(self, user_id: str) -> User:
        """
        Flip ``status`` in a single store-level operation and return the
        updated user.
        """
        ...

    def count_users(self) -> int:
        ...


class PrizeRepository(Protocol):
    def get_prizes(self) -> list[Prize]:
        """Return every prize, newest year first, then by category."""
        ...

    def get_prize(self, prize_id: str) -> Prize:
        ...

    def get_prizes_by_year(self, year: str) -> list[Prize]:
        ...

    def get_prizes_by_category(self, category: str) -> list[Prize]:
        ...

    def get_prizes_by_category_and_year(self, category: str, year: str) -> list[Prize]:
        ...

    def get_categories(self) -> list[str]:
        ...

    def get_years(self) -> list[str]:
        ...

    def save_prize(self, prize: Prize) -> Prize:
        """Insert a prize together with its laureates."""
        ...

    def insert_prizes(self, prizes: Iterable[Prize]) -> int:
        ...

    def delete_prize(self, prize_id: str) -> None:
        """Delete a prize; its laureates go with it."""
        ...
