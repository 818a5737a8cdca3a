from dataclasses import dataclass

import httpx


@dataclass(frozen=True)
class TransportConfig:
    """Options for the ``httpx.AsyncClient`` an ``HttpClient`` owns."""

    max_connections: int = 100
    max_keepalive: int = 20
    keepalive_expiry: float = 30.0
    proxy_url: str | None = None
    proxy_auth: tuple[str, str] | None = None

    @property
    def proxy(self) -> httpx.Proxy | None:
        if not self.proxy_url:
            return None
        return httpx.Proxy(self.proxy_url, auth=self.proxy_auth)

    def create_client(self) -> httpx.AsyncClient:
        # Deadlines are enforced per exchange, so the transport itself never times out.
        return httpx.AsyncClient(
            limits=httpx.Limits(
                max_connections=self.max_connections,
                max_keepalive_connections=self.max_keepalive,
                keepalive_expiry=self.keepalive_expiry,
            ),
            proxy=self.proxy,
            timeout=httpx.Timeout(None),
        )
