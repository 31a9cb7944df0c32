"""
Per-connection authentication state machine
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Pattern

from .auth import is_allowed_origin, is_valid_password
from .constants import (
    AUTH_METHOD_ORIGIN,
    AUTH_METHOD_PASSWORD,
    PONG_TOKEN,
    POLICY_VIOLATION_CLOSE_CODE,
    UNAUTHORIZED_CLOSE_REASON,
)
from .errors import AuthenticationFailure, TransportFailure
from .logger import get_logger, log_connection_event, log_websocket_event
from .models import AuthState

if TYPE_CHECKING:
    from .broadcaster import Broadcaster
    from .transport import Connection

logger = get_logger()


class Session:
    """
    Server-side state bound to one client connection

    Starts UNAUTHENTICATED, becomes AUTHENTICATED through an allowed origin
    at connect time or the shared password as the first payload, and ends
    CLOSED when the connection goes away or is rejected.
    """

    def __init__(self, connection: "Connection", broadcaster: "Broadcaster",
                 password: str, origin_pattern: Pattern[str]):
        self.connection = connection
        self.broadcaster = broadcaster
        self._password = password
        self._origin_pattern = origin_pattern

        self.session_id = uuid.uuid4().hex[:12]
        self.origin: Optional[str] = connection.origin
        self.state = AuthState.UNAUTHENTICATED
        self.auth_method: Optional[str] = None
        self.connected_at = datetime.utcnow()
        self.last_activity: Optional[datetime] = None

    def __repr__(self):
        return f"<Session {self.session_id} {self.state.value}>"

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    @property
    def is_closed(self) -> bool:
        return self.state == AuthState.CLOSED

    @property
    def is_writable(self) -> bool:
        return not self.is_closed and self.connection.is_writable

    async def send(self, text: str):
        """Send raw text to this session's connection; raises TransportFailure"""
        await self.connection.send(text)

    async def open(self):
        """Authenticate by origin before any payload arrives, if the origin is allowed"""
        if is_allowed_origin(self.origin, self._origin_pattern):
            await self._authenticated(AUTH_METHOD_ORIGIN)
        else:
            logger.info(f"Session {self.session_id} awaiting password (origin={self.origin or '-'})")

    async def handle(self, payload: str):
        """
        Drive the state machine with one inbound payload

        Args:
            payload: Text received from the client
        """
        self.last_activity = datetime.utcnow()

        if payload == PONG_TOKEN:
            log_websocket_event("keepalive", self.session_id, "pong received")
            return

        if self.is_closed:
            return

        if not self.is_authenticated:
            try:
                self._authenticate(payload)
            except AuthenticationFailure:
                await self._reject()
            else:
                await self._authenticated(AUTH_METHOD_PASSWORD)
            return

        await self.broadcaster.broadcast(self, payload, include_sender=False)

    def _authenticate(self, payload: str):
        if not is_valid_password(payload, self._password):
            raise AuthenticationFailure(f"session {self.session_id} sent a wrong password")

    async def _authenticated(self, method: str):
        self.state = AuthState.AUTHENTICATED
        self.auth_method = method
        log_connection_event(self.session_id, f"authenticated via {method}", self.origin)
        await self.broadcaster.send_auth_result(self, success=True, method=method)

    async def _reject(self):
        await self.broadcaster.send_auth_result(self, success=False)
        await self.close(POLICY_VIOLATION_CLOSE_CODE, UNAUTHORIZED_CLOSE_REASON)

    async def close(self, code: int = 1000, reason: str = ""):
        """Close the connection and mark the session CLOSED"""
        self.mark_closed()
        try:
            await self.connection.close(code, reason)
        except TransportFailure as e:
            logger.warning(f"Closing session {self.session_id} failed: {e}")

    def mark_closed(self):
        self.state = AuthState.CLOSED
