"""
Real-time message relay
Authenticated WebSocket fan-out with keepalive supervision
"""

from .auth import build_origin_pattern, is_allowed_origin, is_valid_password
from .broadcaster import Broadcaster
from .config import Settings, settings
from .constants import *
from .errors import (
    AuthenticationFailure,
    ConnectionClosed,
    MalformedMessage,
    RelayError,
    TransportFailure,
)
from .keepalive import KeepaliveSupervisor
from .logger import (
    configure_logging,
    get_logger,
    log_connection_event,
    log_message_event,
    log_security_event,
    log_system_event,
    log_websocket_event,
)
from .models import AuthResult, AuthState, BroadcastMessage, ErrorMessage
from .registry import Registry
from .server import RelayServer
from .session import Session
from .transport import Connection, FastAPIConnection

__all__ = [
    'build_origin_pattern',
    'is_allowed_origin',
    'is_valid_password',
    'Broadcaster',
    'Settings',
    'settings',
    'AuthenticationFailure',
    'ConnectionClosed',
    'MalformedMessage',
    'RelayError',
    'TransportFailure',
    'KeepaliveSupervisor',
    'configure_logging',
    'get_logger',
    'log_connection_event',
    'log_message_event',
    'log_security_event',
    'log_system_event',
    'log_websocket_event',
    'AuthResult',
    'AuthState',
    'BroadcastMessage',
    'ErrorMessage',
    'Registry',
    'RelayServer',
    'Session',
    'Connection',
    'FastAPIConnection',
]
