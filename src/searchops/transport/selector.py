"""Host pool with rotation and time-based health tracking.

The selector is plain synchronous bookkeeping: every method runs to completion
without awaiting, so on a single event loop no lock is needed between reading
which host to try next and recording the outcome.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from searchops.exceptions import ConfigError, HostsExhausted

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Host:
    """One cluster endpoint and its liveness state.

    Attributes
    ----------
    url: str
        Base URL without trailing slash, e.g. ``http://es1:9200``.
    failed_at: float | None
        Clock reading of the last transport failure, or None when healthy.
    """

    url: str
    failed_at: Optional[float] = None

    @property
    def healthy(self) -> bool:
        return self.failed_at is None


class EndpointSelector:
    """Rotating selector over a fixed pool of hosts.

    Parameters
    ----------
    hosts: list[str]
        Base URLs of the cluster nodes. Must not be empty.
    cooldown: float
        Seconds a failed host is kept out of rotation.
    clock: callable
        Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        hosts: List[str],
        *,
        cooldown: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        urls = [h.strip().rstrip("/") for h in hosts or [] if h and h.strip()]
        if not urls:
            raise ConfigError("At least one host must be configured")
        self._hosts = [Host(url=u) for u in urls]
        self._cooldown = float(cooldown)
        self._clock = clock
        self._cursor = 0

    @property
    def hosts(self) -> List[Host]:
        return list(self._hosts)

    def endpoints(self) -> List[str]:
        """All configured base URLs regardless of health."""
        return [h.url for h in self._hosts]

    def find(self, url: str) -> Optional[Host]:
        url = url.rstrip("/")
        return next((h for h in self._hosts if h.url == url), None)

    def _is_available(self, host: Host, now: float) -> bool:
        if host.failed_at is None:
            return True
        if now - host.failed_at >= self._cooldown:
            host.failed_at = None
            logger.info("Host %s re-admitted after cool-down", host.url)
            return True
        return False

    def available(self) -> Iterator[Host]:
        """Yield currently healthy hosts, starting one step further each call.

        The rotation start is fixed when this method is called; health is
        checked lazily as each host is pulled, so a failure recorded while the
        sequence is being consumed is honoured for the remaining hosts.
        """
        n = len(self._hosts)
        start = self._cursor % n
        self._cursor = (self._cursor + 1) % n
        return self._iter_from(start)

    def _iter_from(self, start: int) -> Iterator[Host]:
        n = len(self._hosts)
        for i in range(n):
            host = self._hosts[(start + i) % n]
            if self._is_available(host, self._clock()):
                yield host

    def select(self) -> Host:
        """Return the next healthy host or raise HostsExhausted."""
        host = next(self.available(), None)
        if host is None:
            raise HostsExhausted()
        return host

    def on_failure(self, host: Host) -> None:
        """Record a transport failure.

        Repeated marks within the cool-down keep the first timestamp; a mark
        whose cool-down has run out is replaced by a fresh one.
        """
        known = self.find(host.url)
        if known is None:
            return
        now = self._clock()
        if known.failed_at is not None and now - known.failed_at < self._cooldown:
            return
        known.failed_at = now
        logger.warning(
            "Host %s marked failed, out of rotation for %.0fs", known.url, self._cooldown
        )

    def on_success(self, host: Host) -> None:
        """Clear failure state for a host that answered."""
        known = self.find(host.url)
        if known is not None:
            known.failed_at = None
