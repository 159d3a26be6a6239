"""HTTP transport: host pool, failover dispatcher and batch buffer."""

from .buffer import GrowableBuffer
from .dispatcher import Dispatcher
from .selector import EndpointSelector, Host

__all__ = ["GrowableBuffer", "Dispatcher", "EndpointSelector", "Host"]
