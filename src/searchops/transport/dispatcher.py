"""Failover HTTP dispatcher.

Runs one logical request against the selector's host sequence using httpx.
Only transport-level failures (no response at all) move on to the next host;
a received response, whatever its status, ends the call.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, TypeVar, Union

import httpx

from searchops.config import ClusterConfig, ErrorPolicy
from searchops.exceptions import (
    ApplicationError,
    HostsExhausted,
    ProtocolError,
    TransportFailure,
)
from searchops.transport.selector import EndpointSelector, Host

logger = logging.getLogger(__name__)

T = TypeVar("T")
Decoder = Callable[[Any], T]
Body = Union[str, bytes, None]


def join_url(base: str, path: str) -> str:
    if not path:
        return base
    return base.rstrip("/") + "/" + path.lstrip("/")


def _identity(payload: Any) -> Any:
    return payload


def _error_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text or None


class Dispatcher:
    """Execute requests with host failover.

    Parameters
    ----------
    selector: EndpointSelector
        Shared host pool; demoted on transport failures.
    timeout: float
        Per-attempt httpx timeout in seconds.
    error_policy: "strict" | "lenient"
        Strict raises ApplicationError/ProtocolError. Lenient logs them and
        resolves the call to None.
    transport: httpx.AsyncBaseTransport | None
        Optional transport override (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        selector: EndpointSelector,
        *,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        auth: Optional[tuple[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        error_policy: ErrorPolicy = "strict",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.selector = selector
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.auth = auth
        self.error_policy = error_policy
        self._transport = transport
        self._headers: Dict[str, str] = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if headers:
            self._headers.update(headers)

    @classmethod
    def from_config(
        cls,
        cfg: ClusterConfig,
        *,
        error_policy: ErrorPolicy = "strict",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "Dispatcher":
        selector = EndpointSelector(cfg.hosts, cooldown=cfg.cooldown_seconds)
        headers: Dict[str, str] = {}
        auth = None
        if cfg.api_key:
            headers["Authorization"] = f"ApiKey {cfg.api_key}"
        elif cfg.username and cfg.password:
            auth = (cfg.username, cfg.password)
        return cls(
            selector,
            timeout=cfg.timeout,
            verify_ssl=cfg.verify_ssl,
            auth=auth,
            headers=headers,
            error_policy=error_policy,
            transport=transport,
        )

    @property
    def lenient(self) -> bool:
        return self.error_policy == "lenient"

    def _client(self) -> httpx.AsyncClient:
        kwargs: Dict[str, Any] = {
            "timeout": self.timeout,
            "verify": self.verify_ssl,
            "headers": self._headers,
        }
        if self.auth:
            kwargs["auth"] = self.auth
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    def _candidates(self, pinned: Optional[str]) -> Iterator[Host]:
        if pinned is None:
            return self.selector.available()
        host = self.selector.find(pinned) or Host(url=pinned.rstrip("/"))
        return iter([host])

    async def request(
        self,
        method: str,
        path: str,
        *,
        decode: Optional[Decoder[T]] = None,
        body: Body = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        host: Optional[str] = None,
    ) -> Optional[T]:
        """Send ``method path`` to the first host that answers.

        ``body`` must already be materialized: the same bytes are resent to
        every host tried. Raises HostsExhausted when no host answers.
        """
        content = body.encode("utf-8") if isinstance(body, str) else body
        attempts: List[TransportFailure] = []
        async with self._client() as client:
            for candidate in self._candidates(host):
                url = join_url(candidate.url, path)
                try:
                    resp = await client.request(
                        method, url, content=content, params=params, headers=headers
                    )
                except httpx.TransportError as exc:
                    logger.warning("%s %s failed: %s", method, url, exc)
                    attempts.append(TransportFailure(candidate.url, exc))
                    self.selector.on_failure(candidate)
                    continue
                if candidate.failed_at is not None:
                    self.selector.on_success(candidate)
                return self._handle(candidate, method, url, resp, decode or _identity)

        logger.error("%s %s: no host answered (%d attempts)", method, path, len(attempts))
        raise HostsExhausted(attempts) from (attempts[-1] if attempts else None)

    def _handle(
        self,
        host: Host,
        method: str,
        url: str,
        resp: httpx.Response,
        decode: Decoder[T],
    ) -> Optional[T]:
        if resp.status_code >= 400:
            err = ApplicationError(host.url, resp.status_code, _error_body(resp))
            if self.lenient:
                logger.warning("%s %s -> HTTP %d (ignored)", method, url, resp.status_code)
                return None
            raise err

        try:
            payload = resp.json() if resp.content else None
            return decode(payload)
        except (ValueError, TypeError, KeyError) as exc:
            if self.lenient:
                logger.warning("%s %s: unreadable response: %s", method, url, exc)
                return None
            raise ProtocolError(f"{method} {url}: unreadable response: {exc}") from exc
