"""CachedVoter model — locally cached, denormalized registry rows."""

from datetime import date, datetime

from sqlalchemy import BigInteger, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from voter_radius.models.base import Base


class CachedVoter(Base):
    """One voter at one geocoded address, copied from the registry.

    Rows are replaced wholesale per (county, address_id) by a cache refresh
    and never partially updated.
    """

    __tablename__ = "cached_voters"

    county: Mapped[str] = mapped_column(String(3), primary_key=True)
    address_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    voter_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)

    voter_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email_address: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    party: Mapped[str | None] = mapped_column(String(10), nullable=True)
    voter_address: Mapped[str | None] = mapped_column(Text, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_cached_voters_address_id", "address_id"),
        Index("ix_cached_voters_party", "party"),
    )
