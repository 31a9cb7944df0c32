"""
Best-effort fan-out of messages to relay sessions
"""

import json
from typing import TYPE_CHECKING, Optional

from .errors import TransportFailure
from .logger import get_logger, log_message_event, log_security_event
from .models import AuthResult, BroadcastMessage, ErrorMessage
from .registry import Registry

if TYPE_CHECKING:
    from .session import Session

logger = get_logger()


class Broadcaster:
    """Delivers broadcasts to the registry and control messages to single sessions"""

    def __init__(self, registry: Registry):
        self.registry = registry

    async def broadcast(self, sender: Optional["Session"], payload: str, include_sender: bool = False) -> int:
        """
        Deliver a payload to every authenticated, writable session

        Args:
            sender: Session the payload came from
            payload: Sender-supplied content
            include_sender: Whether the sender receives its own message

        Returns:
            Number of successful recipients
        """
        text = json.dumps(BroadcastMessage(message=payload).to_dict())
        successful_sends = 0
        sender_id = sender.session_id if sender is not None else "-"

        for session in await self.registry.snapshot():
            if session is sender and not include_sender:
                continue
            if not session.is_authenticated or not session.is_writable:
                continue

            try:
                await session.send(text)
                successful_sends += 1
            except TransportFailure as e:
                # Recipient is reaped by its own close event
                logger.warning(f"Failed to deliver broadcast to {session.session_id}: {e}")

        log_message_event(sender_id, "broadcast", f"recipients={successful_sends} length={len(payload)}")
        return successful_sends

    async def send_auth_result(self, session: "Session", success: bool, method: Optional[str] = None) -> bool:
        """
        Send the outcome of an authentication attempt to one session

        Returns:
            True if the control message was delivered
        """
        result = AuthResult(success=success, method=method)
        try:
            await session.send(json.dumps(result.to_dict()))
        except TransportFailure as e:
            logger.error(f"Failed to send auth result to {session.session_id}: {e}")
            return False

        if not success:
            log_security_event("authentication_failed", {
                "session": session.session_id,
                "origin": session.origin,
            })
        return True

    async def send_error_message(self, session: "Session", error_message: str) -> bool:
        """
        Send an error notification to one session

        Args:
            session: Session that sent the offending payload
            error_message: Error description
        """
        try:
            await session.send(json.dumps(ErrorMessage(message=error_message).to_dict()))
        except TransportFailure as e:
            logger.error(f"Failed to send error message to {session.session_id}: {e}")
            return False

        logger.info(f"Error message sent to {session.session_id}: {error_message}")
        return True
