"""
Connection abstraction consumed by the relay core, and its FastAPI adapter
"""

from typing import Optional, Protocol

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from .constants import RESPONSE_MESSAGES
from .errors import ConnectionClosed, MalformedMessage, TransportFailure
from .logger import log_websocket_event


class Connection(Protocol):
    """Bidirectional, message-framed connection owned by one session"""

    connection_id: str
    origin: Optional[str]

    @property
    def is_writable(self) -> bool: ...

    async def receive(self) -> str: ...

    async def send(self, text: str) -> None: ...

    async def close(self, code: int = 1000, reason: str = "") -> None: ...


class FastAPIConnection:
    """Adapts a FastAPI/Starlette WebSocket to the relay's Connection protocol"""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self.connection_id = f"ws_{id(websocket)}"
        # Origin is captured once from the handshake headers
        self.origin: Optional[str] = websocket.headers.get("origin")

    async def accept(self):
        await self.websocket.accept()
        client_ip = self.websocket.client.host if self.websocket.client else "unknown"
        log_websocket_event("connection_accepted", self.connection_id, f"client_ip={client_ip}")

    @property
    def is_writable(self) -> bool:
        return (
            self.websocket.application_state == WebSocketState.CONNECTED
            and self.websocket.client_state == WebSocketState.CONNECTED
        )

    async def receive(self) -> str:
        """
        Wait for the next inbound payload

        Returns:
            Payload decoded as text

        Raises:
            ConnectionClosed: the peer disconnected
            MalformedMessage: the frame is not valid UTF-8 text
        """
        try:
            message = await self.websocket.receive()
        except RuntimeError as exc:
            raise ConnectionClosed(reason=str(exc)) from exc

        if message["type"] == "websocket.disconnect":
            raise ConnectionClosed(message.get("code", 1000), message.get("reason") or "")

        text = message.get("text")
        if text is not None:
            return text

        data = message.get("bytes")
        if data is None:
            raise MalformedMessage(RESPONSE_MESSAGES["empty_frame"])

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedMessage(RESPONSE_MESSAGES["invalid_encoding"]) from exc

    async def send(self, text: str):
        if not self.is_writable:
            raise TransportFailure(f"{self.connection_id} is not writable")

        try:
            await self.websocket.send_text(text)
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            raise TransportFailure(f"send to {self.connection_id} failed: {exc}") from exc

    async def close(self, code: int = 1000, reason: str = ""):
        if self.websocket.application_state == WebSocketState.DISCONNECTED:
            return

        try:
            await self.websocket.close(code=code, reason=reason)
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            log_websocket_event("close_failed", self.connection_id, str(exc))
        else:
            log_websocket_event("closed", self.connection_id, f"code={code} reason={reason}")
