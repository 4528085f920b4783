"""Contracts (protocols) implemented by adapters."""

from ns_planner.domain.contracts.ttl_cache import TtlCacheProtocol

__all__ = ["TtlCacheProtocol"]
