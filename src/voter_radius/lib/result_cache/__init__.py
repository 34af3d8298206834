"""Result cache library — TTL-bounded local copy of registry rows."""

from voter_radius.lib.result_cache.store import CacheReadResult, ResultCache

__all__ = [
    "CacheReadResult",
    "ResultCache",
]
