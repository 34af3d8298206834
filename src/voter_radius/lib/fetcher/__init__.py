"""Fetcher library — registry reads for chunks of address ids.

Public API:
    - BatchFetcher: Chunked, concurrency-bounded fetch
    - JoinStrategy and its four implementations
    - get_strategy / canonical_strategy_name: Strategy lookup by name or alias
    - chunked: Fixed-size id partitioning
    - compose_voter_address: Two-line display address
"""

from voter_radius.lib.fetcher.batch import BatchFetcher, compose_voter_address
from voter_radius.lib.fetcher.chunking import DEFAULT_CHUNK_SIZE, chunked
from voter_radius.lib.fetcher.strategies import (
    AddressDrivenStrategy,
    DerivedTableStrategy,
    DiagnosticStrategy,
    JoinStrategy,
    RegistryDrivenStrategy,
    canonical_strategy_name,
    get_strategy,
)

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "AddressDrivenStrategy",
    "BatchFetcher",
    "DerivedTableStrategy",
    "DiagnosticStrategy",
    "JoinStrategy",
    "RegistryDrivenStrategy",
    "canonical_strategy_name",
    "chunked",
    "compose_voter_address",
    "get_strategy",
]
