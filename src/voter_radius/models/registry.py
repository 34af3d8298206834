"""Voter registry models — read-only mappings of the remote registry store.

The registry keeps history: a voter_master row is in effect only while its
``exp_date`` equals ``ACTIVE_EXP_DATE``.
"""

from datetime import date

from sqlalchemy import BigInteger, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from voter_radius.models.base import RegistryBase

ACTIVE_EXP_DATE = date(2100, 12, 31)


class VoterMaster(RegistryBase):
    """Registration row linking a voter to an address and a demographics row."""

    __tablename__ = "voter_master"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    voter_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    county: Mapped[str] = mapped_column(String(3), nullable=False)
    voter_addr_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    demographics_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    party: Mapped[str | None] = mapped_column(String(10), nullable=True)
    exp_date: Mapped[date] = mapped_column(Date, nullable=False)


class Demographics(RegistryBase):
    """Name, contact and birth-date attributes of a voter."""

    __tablename__ = "demographics"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    county: Mapped[str] = mapped_column(String(3), nullable=False)
    voter_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    voter_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email_address: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)


class MasterVoterAddress(RegistryBase):
    """Residence address; ``id`` is the same id used by the spatial store."""

    __tablename__ = "master_voter_address"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    street_address: Mapped[str | None] = mapped_column(String(200), nullable=True)
    address_line2: Mapped[str | None] = mapped_column(String(200), nullable=True)
    apt_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
