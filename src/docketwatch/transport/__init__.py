from .base import FetchResponse, Transport, TransportError, is_soft_block
from .http import BrowserTransport, browser_headers, browser_ssl_context
from .static import StaticTransport, canned_response

__all__ = [
    "BrowserTransport",
    "FetchResponse",
    "StaticTransport",
    "Transport",
    "TransportError",
    "browser_headers",
    "browser_ssl_context",
    "canned_response",
    "is_soft_block",
]
