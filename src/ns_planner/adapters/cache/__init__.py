"""Cache adapters."""

from ns_planner.adapters.cache.response_cache import ResponseCache, SearchSignature
from ns_planner.adapters.cache.ttl_cache import CacheEntry, TtlCache

__all__ = ["CacheEntry", "ResponseCache", "SearchSignature", "TtlCache"]
