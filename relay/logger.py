"""
Logging configuration for the message relay
"""

import logging
import re
import sys
from typing import Optional

from .constants import LOG_LEVEL

LOGGER_NAME = "message_relay"


class SecureFormatter(logging.Formatter):
    """Custom formatter that masks credentials in log lines"""

    _SECRET_PATTERN = re.compile(r'(password|token|secret)=(\S+)', re.IGNORECASE)

    def format(self, record):
        message = super().format(record)
        return self._SECRET_PATTERN.sub(r'\1=***', message)


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Get a logger instance with the relay's handler attached

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(SecureFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logger.addHandler(handler)
        logger.setLevel(LOG_LEVEL)
        logger.propagate = False

    return logger


def configure_logging(level: str):
    """Apply the configured level to the relay logger"""
    get_logger().setLevel(level.upper())


def log_security_event(event_type: str, details: dict, logger: Optional[logging.Logger] = None):
    """
    Log security-related events with structured data

    Args:
        event_type: Type of security event
        details: Event details
        logger: Logger instance (optional)
    """
    if logger is None:
        logger = get_logger()
    logger.warning(f"SECURITY_EVENT: {event_type} | {details}")


def log_connection_event(session_id: str, action: str, origin: Optional[str] = None, population: Optional[int] = None):
    """
    Log connection lifecycle events

    Args:
        session_id: Session identifier
        action: Action (connect/disconnect/authenticated)
        origin: Declared origin of the client
        population: Registry size after the event
    """
    details = f"CONNECTION_EVENT: {action} | session={session_id} | origin={origin or '-'}"
    if population is not None:
        details += f" | population={population}"
    get_logger().info(details)


def log_message_event(session_id: str, action: str, details: str = ""):
    """
    Log message fan-out events

    Args:
        session_id: Sender session identifier
        action: Action (broadcast/skip/error)
        details: Additional details
    """
    get_logger().info(f"MESSAGE_EVENT: {action} | session={session_id} | {details}")


def log_websocket_event(event_type: str, connection_id: str, details: str = ""):
    """Log WebSocket protocol events"""
    get_logger().debug(f"WEBSOCKET_EVENT: {event_type} | conn={connection_id} | {details}")


def log_system_event(event_type: str, details: str, level: str = "info"):
    """
    Log system-level events

    Args:
        event_type: Type of system event
        details: Event details
        level: Log level (info/warning/error)
    """
    logger = get_logger()
    log_message = f"SYSTEM_EVENT: {event_type} | {details}"

    if level == "warning":
        logger.warning(log_message)
    elif level == "error":
        logger.error(log_message)
    else:
        logger.info(log_message)
