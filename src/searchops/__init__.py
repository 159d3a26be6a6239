"""searchops: resilient async client for a clustered document-search service.

Failover across hosts, ndjson bulk batching and scroll pagination over httpx.
"""

from .client import SearchOps
from .config import Settings, load_settings
from .exceptions import (
    ApplicationError,
    ConfigError,
    HostsExhausted,
    ProtocolError,
    SearchOpsError,
    TransportFailure,
)
from .search import RootQuery, Scroll

__all__ = [
    "SearchOps",
    "Settings",
    "load_settings",
    "RootQuery",
    "Scroll",
    "SearchOpsError",
    "ConfigError",
    "TransportFailure",
    "HostsExhausted",
    "ApplicationError",
    "ProtocolError",
]
