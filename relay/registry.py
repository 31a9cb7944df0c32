"""
Concurrency-safe registry of live relay sessions
"""

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, List

from .logger import get_logger, log_connection_event

if TYPE_CHECKING:
    from .session import Session

logger = get_logger()


class Registry:
    """The set of sessions connected at any instant"""

    def __init__(self):
        # id(connection) -> Session
        self._sessions: Dict[int, "Session"] = {}
        # Serialises add/remove/snapshot
        self._lock = asyncio.Lock()

    async def add(self, session: "Session") -> int:
        """
        Register a newly connected session

        Args:
            session: Session wrapping the accepted connection

        Returns:
            Population after insertion; 1 means first connection
        """
        async with self._lock:
            self._sessions[id(session.connection)] = session
            population = len(self._sessions)

        log_connection_event(session.session_id, "connect", session.origin, population)
        return population

    async def remove(self, session: "Session") -> int:
        """
        Deregister a session whose connection has ended

        Args:
            session: Session to remove

        Returns:
            Population after removal; 0 means last disconnection
        """
        async with self._lock:
            removed = self._sessions.get(id(session.connection)) is session
            if removed:
                del self._sessions[id(session.connection)]
            population = len(self._sessions)

        if removed:
            log_connection_event(session.session_id, "disconnect", session.origin, population)
        return population

    async def snapshot(self) -> List["Session"]:
        """Current membership, safe to iterate while others connect or leave"""
        async with self._lock:
            return list(self._sessions.values())

    async def for_each(self, visitor: Callable[["Session"], Awaitable[None]]):
        """
        Apply an async visitor to every member of the current snapshot

        Args:
            visitor: Coroutine function called once per session
        """
        for session in await self.snapshot():
            await visitor(session)

    def size(self) -> int:
        return len(self._sessions)

    def __contains__(self, session: "Session") -> bool:
        return self._sessions.get(id(session.connection)) is session

    async def get_connection_stats(self) -> Dict[str, int]:
        """
        Get overall connection statistics

        Returns:
            Dictionary with connection stats
        """
        async with self._lock:
            sessions = list(self._sessions.values())

        return {
            "total_clients": len(sessions),
            "authenticated_clients": sum(1 for s in sessions if s.is_authenticated),
        }
