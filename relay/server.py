"""
Connection lifecycle: one loop per connection over the shared registry
"""

from typing import Any, Dict, Optional

from .broadcaster import Broadcaster
from .config import Settings
from .errors import ConnectionClosed, MalformedMessage
from .keepalive import KeepaliveSupervisor
from .logger import get_logger, log_security_event
from .registry import Registry
from .session import Session
from .transport import Connection

logger = get_logger()


class RelayServer:
    """Owns the registry, fan-out and keepalive shared by all connections"""

    def __init__(self, settings: Settings, registry: Optional[Registry] = None):
        self.settings = settings
        self.registry = registry or Registry()
        self.broadcaster = Broadcaster(self.registry)
        self.keepalive = KeepaliveSupervisor(self.registry, settings.KEEPALIVE_INTERVAL)
        self._origin_regex = settings.origin_regex

    def create_session(self, connection: Connection) -> Session:
        return Session(
            connection,
            self.broadcaster,
            password=self.settings.RELAY_PASSWORD,
            origin_pattern=self._origin_regex,
        )

    async def serve(self, connection: Connection):
        """
        Run one accepted connection until it closes

        Registers the session, authenticates by origin when possible, feeds
        each inbound payload to the session in arrival order and deregisters
        on exit. The keepalive supervisor follows population transitions.

        Args:
            connection: Accepted connection, exclusively owned by the session
        """
        session = self.create_session(connection)

        if await self.registry.add(session) == 1:
            logger.info("First connection, starting keepalive")
            self.keepalive.start()

        try:
            await session.open()

            while not session.is_closed:
                try:
                    payload = await connection.receive()
                except MalformedMessage as e:
                    await self.broadcaster.send_error_message(session, str(e))
                    continue
                except ConnectionClosed as e:
                    logger.info(f"Session {session.session_id} disconnected (code={e.code})")
                    break

                await session.handle(payload)

        except Exception as e:
            logger.error(f"Connection loop error for {session.session_id}: {e}")
            log_security_event("connection_loop_error", {
                "session": session.session_id,
                "origin": session.origin,
                "error": str(e),
            })

        finally:
            session.mark_closed()
            if await self.registry.remove(session) == 0:
                logger.info("Last client disconnected, stopping keepalive")
                self.keepalive.stop()

    async def get_stats(self) -> Dict[str, Any]:
        stats: Dict[str, Any] = await self.registry.get_connection_stats()
        stats["keepalive_running"] = self.keepalive.is_running
        stats["keepalive_interval"] = self.keepalive.interval
        return stats

    async def shutdown(self):
        await self.keepalive.shutdown()
