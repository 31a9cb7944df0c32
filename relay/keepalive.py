"""
Periodic liveness probing of connected sessions
"""

import asyncio
from typing import Optional

from .constants import PING_TOKEN
from .errors import TransportFailure
from .logger import get_logger, log_system_event
from .registry import Registry

logger = get_logger()


class KeepaliveSupervisor:
    """Pings every session on a fixed interval while the registry is non-empty"""

    def __init__(self, registry: Registry, interval: float):
        self.registry = registry
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Start the ping loop; called on the 0 -> 1 population transition"""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())
        log_system_event("keepalive_started", f"interval={self.interval}s")

    def stop(self) -> Optional[asyncio.Task]:
        """Cancel the ping loop; called on the 1 -> 0 population transition"""
        task = self._task
        if task is None:
            return None
        task.cancel()
        self._task = None
        log_system_event("keepalive_stopped", "registry empty")
        return task

    async def shutdown(self):
        """Cancel the ping loop and wait for it to finish"""
        task = self.stop()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def tick(self) -> int:
        """
        Send one liveness probe to every writable session

        Returns:
            Number of sessions that were pinged
        """
        pinged = 0
        for session in await self.registry.snapshot():
            if not session.is_writable:
                continue
            try:
                await session.send(PING_TOKEN)
                pinged += 1
            except TransportFailure as e:
                logger.warning(f"Keepalive ping to {session.session_id} failed: {e}")

        logger.debug(f"Keepalive ping sent to {pinged} sessions")
        return pinged

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Keepalive tick error: {e}")
