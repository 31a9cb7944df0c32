"""
Data models for relay sessions and wire messages
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from .constants import (
    MESSAGE_TYPE_AUTH,
    MESSAGE_TYPE_BROADCAST,
    MESSAGE_TYPE_ERROR,
    RESPONSE_MESSAGES,
)


def _now_timestamp() -> int:
    return int(datetime.utcnow().timestamp())


class AuthState(str, Enum):
    """Lifecycle states of a session"""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


@dataclass
class AuthResult:
    """Outcome of an authentication attempt, sent to one session only"""
    success: bool
    method: Optional[str] = None
    timestamp: int = field(default_factory=_now_timestamp)

    @property
    def message(self) -> str:
        return RESPONSE_MESSAGES["auth_success" if self.success else "auth_failure"]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        data = {
            "type": MESSAGE_TYPE_AUTH,
            "status": "success" if self.success else "failure",
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.success:
            data["method"] = self.method
        return data


@dataclass
class ErrorMessage:
    """Error notification for a payload that could not be interpreted"""
    message: str
    timestamp: int = field(default_factory=_now_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": MESSAGE_TYPE_ERROR,
            "message": self.message,
            "timestamp": self.timestamp,
        }


@dataclass
class BroadcastMessage:
    """Sender-supplied content wrapped for fan-out"""
    message: str
    timestamp: int = field(default_factory=_now_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": MESSAGE_TYPE_BROADCAST,
            "message": self.message,
            "timestamp": self.timestamp,
        }
