"""Tracking of the latest search per caller, so stale results are not delivered."""

from starlette.requests import Request

from ns_planner.adapters.cache import SearchSignature
from ns_planner.adapters.web.rate_limit_middleware import extract_client_ip

CLIENT_ID_HEADER = "X-Client-Id"


def caller_id(request: Request) -> str:
    """Identify the caller by the X-Client-Id header, or by client IP."""
    client_id = request.headers.get(CLIENT_ID_HEADER, "").strip()
    if client_id:
        return f"id:{client_id[:128]}"
    return f"ip:{extract_client_ip(request)}"


def search_scope(caller: str, endpoint: str, signature: SearchSignature) -> str:
    """Scope in which a newer search supersedes an older one.

    A caller with its own client id supersedes any of its searches on the endpoint.
    An IP can be shared by many users, so there only an identical search supersedes.
    """
    if caller.startswith("id:"):
        return endpoint
    return f"{endpoint}|{signature.cache_key()}"


class SupersessionTracker:
    """Numbers the searches of each caller per scope.

    A search is current while no newer search of the same caller in the same scope
    has started. Only the most recently active callers are remembered.
    """

    def __init__(self, max_callers: int = 10_000) -> None:
        self.max_callers = max_callers
        self._generations: dict[tuple[str, str], int] = {}

    def __len__(self) -> int:
        return len(self._generations)

    def begin(self, caller: str, scope: str) -> int:
        """Register a new search and return its generation."""
        key = (caller, scope)
        generation = self._generations.pop(key, 0) + 1
        self._generations[key] = generation
        while len(self._generations) > self.max_callers:
            del self._generations[next(iter(self._generations))]
        return generation

    def is_current(self, caller: str, scope: str, generation: int) -> bool:
        current = self._generations.get((caller, scope))
        # A forgotten caller cannot have started a newer search
        return current is None or current == generation
