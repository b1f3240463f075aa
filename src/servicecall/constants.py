"""Constants used throughout servicecall.

This module contains constants that do not depend on runtime configuration
or environment variables. For environment-based configuration, see the
config module.
"""

from typing import Final

# =============================================================================
# Transport
# =============================================================================

DEFAULT_CONNECT_TIMEOUT: Final[float] = 60.0
"""Seconds to wait for a TCP connection before failing the request."""

DEFAULT_READ_TIMEOUT: Final[float] = 60.0
"""Seconds to wait for response data before failing the request."""

DEFAULT_MAX_POOL_CONNECTIONS: Final[int] = 10
"""Maximum number of pooled HTTP connections per transport."""

DEFAULT_ASYNC_WORKERS: Final[int] = 8
"""Worker threads serving non-blocking sends."""

# =============================================================================
# Wire format
# =============================================================================

JSON_CONTENT_TYPE_PREFIX: Final[str] = "application/x-amz-json-"
"""Content type prefix of JSON-RPC requests; the JSON version is appended."""

TARGET_HEADER: Final[str] = "X-Amz-Target"
"""Header naming the target operation of a JSON-RPC request."""

REQUEST_ID_HEADERS: Final[tuple[str, ...]] = ("x-amzn-RequestId", "x-amz-request-id")
"""Response headers that may carry the service request ID."""

SERVER_ERROR_STATUS: Final[int] = 500
"""Status codes at or above this are reported as 'server' errors."""

# =============================================================================
# Call options
# =============================================================================

FUTURE_PARAMETER: Final[str] = "@future"
"""Parameter key that requests a deferred result instead of a realized one."""
