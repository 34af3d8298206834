"""Join strategies for fetching registry rows for a chunk of address ids.

Every strategy joins voter_master, demographics and master_voter_address,
filters to one county, optionally one party, and active registrations only.
They differ only in where the chunk's id list enters the join, which steers
the remote planner; all of them return the same rows.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from sqlalchemy import ColumnElement, Integer, Select, and_, literal, select, union_all

from voter_radius.lib.types import matches_all_parties
from voter_radius.models.registry import ACTIVE_EXP_DATE, Demographics, MasterVoterAddress, VoterMaster

_DEMOGRAPHICS_JOIN = and_(
    Demographics.id == VoterMaster.demographics_id,
    Demographics.county == VoterMaster.county,
)
_ADDRESS_JOIN = VoterMaster.voter_addr_id == MasterVoterAddress.id


def _columns() -> list[ColumnElement]:
    return [
        VoterMaster.voter_id,
        VoterMaster.county,
        VoterMaster.party,
        MasterVoterAddress.id.label("address_id"),
        MasterVoterAddress.street_address,
        MasterVoterAddress.address_line2,
        MasterVoterAddress.apt_number,
        Demographics.voter_name,
        Demographics.last_name,
        Demographics.first_name,
        Demographics.email_address,
        Demographics.phone_number,
        Demographics.birth_date,
    ]


def _filters(county: str, party: str) -> list[ColumnElement[bool]]:
    filters = [VoterMaster.county == county, VoterMaster.exp_date == ACTIVE_EXP_DATE]
    if not matches_all_parties(party):
        filters.append(VoterMaster.party == party)
    return filters


def _id_relation(address_ids: Sequence[int]):
    """Inline the ids as a derived table: SELECT :id UNION ALL SELECT :id ..."""
    selects = [select(literal(address_id, Integer).label("address_id")) for address_id in address_ids]
    relation = selects[0] if len(selects) == 1 else union_all(*selects)
    return relation.subquery("chunk_ids")


class JoinStrategy(ABC):
    """Builds the registry query for one chunk of address ids."""

    name: str

    @abstractmethod
    def build(self, address_ids: Sequence[int], county: str, party: str) -> Select:
        """Return the SELECT for ``address_ids`` (must be non-empty and distinct)."""


class RegistryDrivenStrategy(JoinStrategy):
    """IN list against voter_master's own address foreign key."""

    name = "registry"

    def build(self, address_ids: Sequence[int], county: str, party: str) -> Select:
        return (
            select(*_columns())
            .select_from(VoterMaster)
            .join(Demographics, _DEMOGRAPHICS_JOIN)
            .join(MasterVoterAddress, _ADDRESS_JOIN)
            .where(*_filters(county, party), VoterMaster.voter_addr_id.in_(list(address_ids)))
        )


class AddressDrivenStrategy(JoinStrategy):
    """IN list against master_voter_address.id, with the address table joined first."""

    name = "address"

    def build(self, address_ids: Sequence[int], county: str, party: str) -> Select:
        return (
            select(*_columns())
            .select_from(MasterVoterAddress)
            .join(VoterMaster, _ADDRESS_JOIN)
            .join(Demographics, _DEMOGRAPHICS_JOIN)
            .where(*_filters(county, party), MasterVoterAddress.id.in_(list(address_ids)))
        )


class DerivedTableStrategy(JoinStrategy):
    """Ids as an inline literal relation, joined first to force the join order."""

    name = "derived"

    def build(self, address_ids: Sequence[int], county: str, party: str) -> Select:
        chunk_ids = _id_relation(address_ids)
        return (
            select(*_columns())
            .select_from(chunk_ids)
            .join(VoterMaster, VoterMaster.voter_addr_id == chunk_ids.c.address_id)
            .join(Demographics, _DEMOGRAPHICS_JOIN)
            .join(MasterVoterAddress, _ADDRESS_JOIN)
            .where(*_filters(county, party))
        )


class DiagnosticStrategy(JoinStrategy):
    """Derived-table variant with a pinned join order, for plan comparison.

    On MySQL the statement carries STRAIGHT_JOIN so tables are joined in the
    order written: ids → address → voter_master → demographics.
    """

    name = "diagnostic"

    def build(self, address_ids: Sequence[int], county: str, party: str) -> Select:
        chunk_ids = _id_relation(address_ids)
        return (
            select(*_columns())
            .prefix_with("STRAIGHT_JOIN", dialect="mysql")
            .select_from(chunk_ids)
            .join(MasterVoterAddress, MasterVoterAddress.id == chunk_ids.c.address_id)
            .join(VoterMaster, _ADDRESS_JOIN)
            .join(Demographics, _DEMOGRAPHICS_JOIN)
            .where(*_filters(county, party))
        )


_STRATEGIES: dict[str, type[JoinStrategy]] = {
    cls.name: cls for cls in (RegistryDrivenStrategy, AddressDrivenStrategy, DerivedTableStrategy, DiagnosticStrategy)
}

# Legacy names still accepted on the command line
_STRATEGY_ALIASES = {"vm_in": "registry", "in": "address"}


def canonical_strategy_name(value: str) -> str:
    """Map a strategy name or legacy alias (``vm_in``, ``in``) to its canonical name.

    Raises:
        ValueError: If the name is not a known join strategy.
    """
    name = value.strip().lower()
    name = _STRATEGY_ALIASES.get(name, name)
    if name not in _STRATEGIES:
        msg = f"Unknown fetch strategy: {value!r}. Available: {sorted(_STRATEGIES)}"
        raise ValueError(msg)
    return name


def get_strategy(name: str) -> JoinStrategy:
    """Instantiate a join strategy by name or legacy alias.

    Raises:
        ValueError: If the name is not registered.
    """
    return _STRATEGIES[canonical_strategy_name(name)]()
