"""URL helper utilities."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urljoin, urlsplit

ALLOWED_SCHEMES = {"http": 80, "https": 443}


class InvalidTarget(ValueError):
    """Raised when a URL cannot be probed. The message is the client-facing text."""


@dataclass(frozen=True)
class ProbeTarget:
    scheme: str
    host: str
    port: int
    path: str = "/"
    query: str = ""

    @property
    def default_port(self) -> bool:
        return ALLOWED_SCHEMES[self.scheme] == self.port

    @property
    def netloc(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return host if self.default_port else f"{host}:{self.port}"

    @property
    def request_target(self) -> str:
        return self.path + (f"?{self.query}" if self.query else "")

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.netloc}{self.request_target}"


def parse_target(url: str) -> ProbeTarget:
    """Validate ``url`` and fill in the default port, path and query."""

    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise InvalidTarget(f"ERR Invalid URL: {exc}") from None
    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise InvalidTarget(f"ERR Invalid protocol: {url}")
    if not parts.hostname:
        raise InvalidTarget("ERR Invalid URL: Missing hostname")
    try:
        port = parts.port
    except ValueError:
        raise InvalidTarget("ERR Invalid URL: Bad port number") from None

    return ProbeTarget(
        scheme=scheme,
        host=parts.hostname,
        port=port or ALLOWED_SCHEMES[scheme],
        path=parts.path or "/",
        query=parts.query,
    )


def follow_location(current: str, location: str) -> str:
    """Resolve a ``Location`` header value against the URL that returned it."""

    return urljoin(current, location.strip())


__all__ = ["ALLOWED_SCHEMES", "InvalidTarget", "ProbeTarget", "follow_location", "parse_target"]
