from typing import Dict


class RequestGuard:
    """Tickets for in-flight gateway calls, one counter per action kind.

    ``begin`` hands out a new ticket and makes every older ticket of that kind stale;
    a response is applied only while its ticket is still ``current``.
    """

    def __init__(self):
        self._latest: Dict[str, int] = {}

    def begin(self, kind: str) -> int:
        ticket = self._latest.get(kind, 0) + 1
        self._latest[kind] = ticket
        return ticket

    def invalidate(self, kind: str) -> None:
        self._latest[kind] = self._latest.get(kind, 0) + 1

    def current(self, kind: str, ticket: int) -> bool:
        return self._latest.get(kind, 0) == ticket
