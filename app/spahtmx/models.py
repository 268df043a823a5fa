from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    password: Mapped[str | None] = mapped_column(String(255), nullable=True)  # salted hash
    email: Mapped[str] = mapped_column(String(320), nullable=False, default="")
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)


class PrizeRecord(Base):
    __tablename__ = "prizes"
    __table_args__ = (
        Index("idx_prizes_year", "year"),
        Index("idx_prizes_category", "category"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    year: Mapped[str] = mapped_column(String(4), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    overall_motivation: Mapped[str] = mapped_column(Text, nullable=False, default="")

    laureates: Mapped[list["LaureateRecord"]] = relationship(
        "LaureateRecord",
        back_populates="prize",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="LaureateRecord.id",
    )


class LaureateRecord(Base):
    __tablename__ = "laureates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    prize_id: Mapped[int] = mapped_column(ForeignKey("prizes.id", ondelete="CASCADE"), nullable=False, index=True)
    firstname: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    surname: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    motivation: Mapped[str] = mapped_column(Text, nullable=False, default="")
    share: Mapped[str] = mapped_column(String(8), nullable=False, default="")  # e.g. "2" for 1/2

    prize: Mapped[PrizeRecord] = relationship("PrizeRecord", back_populates="laureates")
