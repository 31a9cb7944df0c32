"""
Error taxonomy for the message relay
"""


class RelayError(Exception):
    """Base class for relay errors"""


class AuthenticationFailure(RelayError):
    """Unauthenticated client supplied a wrong password"""


class MalformedMessage(RelayError):
    """Inbound frame cannot be interpreted as a text payload"""


class TransportFailure(RelayError):
    """Sending to a connection failed"""


class ConnectionClosed(RelayError):
    """The peer closed the connection or it broke"""

    def __init__(self, code: int = 1000, reason: str = ""):
        super().__init__(f"connection closed ({code}) {reason}".strip())
        self.code = code
        self.reason = reason
