"""
Origin and password checks used to authenticate relay clients
"""

import hmac
import re
from typing import Optional, Pattern, Union

from .constants import ORIGIN_PATTERN_TEMPLATE


def build_origin_pattern(host: str) -> Pattern[str]:
    """
    Compile the allowed-origin pattern for a host

    Matches http/https, an optional ``www.`` prefix, the host itself,
    an optional port and an optional path, ignoring case.

    Args:
        host: Allowed host name, e.g. ``example.com``

    Returns:
        Compiled case-insensitive pattern
    """
    return re.compile(ORIGIN_PATTERN_TEMPLATE.format(host=re.escape(host)), re.IGNORECASE)


def is_allowed_origin(origin: Optional[str], pattern: Union[str, Pattern[str]]) -> bool:
    """
    Check a declared origin against the allowed-origin pattern

    Args:
        origin: Origin header sent by the client, may be absent
        pattern: Compiled pattern or pattern source

    Returns:
        True if the origin is present and matches
    """
    if not origin:
        return False

    if isinstance(pattern, str):
        pattern = re.compile(pattern, re.IGNORECASE)

    return pattern.match(origin) is not None


def is_valid_password(candidate: Optional[str], password: str) -> bool:
    """
    Compare a client-supplied secret with the configured password

    Args:
        candidate: Payload sent by the client
        password: Configured shared password

    Returns:
        True if both are non-empty and equal
    """
    if not isinstance(candidate, str) or not password:
        return False

    return hmac.compare_digest(candidate.encode("utf-8"), password.encode("utf-8"))
