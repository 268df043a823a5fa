from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class User:
    id: str
    username: str
    email: str
    status: bool = False
    password_hash: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Laureate:
    firstname: str = ""
    surname: str = ""
    motivation: str = ""
    share: str = ""

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.firstname, self.surname) if p)


@dataclass(frozen=True)
class Prize:
    year: str
    category: str
    overall_motivation: str = ""
    laureates: tuple[Laureate, ...] = field(default_factory=tuple)
    id: str = ""


def _text(value) -> str:
    # the API wraps motivations in literal double quotes
    return str(value or "").strip().strip("\"").strip()


def prize_from_json(data: dict) -> Prize:
    """Build a Prize from the Nobel Prize API (v1) JSON layout."""
    laureates = tuple(
        Laureate(
            firstname=_text(l.get("firstname")),
            surname=_text(l.get("surname")),
            motivation=_text(l.get("motivation")),
            share=_text(l.get("share")),
        )
        for l in (data.get("laureates") or [])
    )
    return Prize(
        year=_text(data.get("year")),
        category=_text(data.get("category")),
        overall_motivation=_text(data.get("overallMotivation")),
        laureates=laureates,
    )
