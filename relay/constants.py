"""
Protocol constants for the message relay
"""

# Liveness tokens
PING_TOKEN = "ping"
PONG_TOKEN = "pong"

# Close codes
POLICY_VIOLATION_CLOSE_CODE = 1008
UNAUTHORIZED_CLOSE_REASON = "Unauthorized"

# Defaults
DEFAULT_KEEPALIVE_INTERVAL = 50
DEFAULT_ALLOWED_ORIGIN_HOST = "joshuaingle.art"
DEFAULT_PASSWORD = "asdf"
DEFAULT_HTTP_PORT = 3000
DEFAULT_DEV_WS_PORT = 5001

# Origin pattern template: scheme, optional www., host, optional port, optional path
ORIGIN_PATTERN_TEMPLATE = r'^https?://(www\.)?{host}(:\d+)?(/.*)?$'

# Logging levels
LOG_LEVEL = "INFO"

# Control message types
MESSAGE_TYPE_AUTH = "auth"
MESSAGE_TYPE_ERROR = "error"
MESSAGE_TYPE_BROADCAST = "broadcast"

AUTH_METHOD_ORIGIN = "origin"
AUTH_METHOD_PASSWORD = "password"

# Messages sent to clients
RESPONSE_MESSAGES = {
    "auth_success": "Authenticated successfully",
    "auth_failure": "Unauthorized: Invalid password or origin",
    "invalid_encoding": "Message must be UTF-8 text",
    "empty_frame": "Message frame carried no payload",
}
