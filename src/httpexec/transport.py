"""Pre-built HTTP clients keyed by certificate and redirect policy."""

from typing import NamedTuple

import httpx


class TransportVariant(NamedTuple):
    """Key selecting one of the four client configurations."""

    ignore_certificate_errors: bool
    follow_redirects: bool

    @property
    def name(self) -> str:
        """Stable name for logging."""
        parts = ["http_executor"]
        if self.ignore_certificate_errors:
            parts.append("ignore_certs")
        if not self.follow_redirects:
            parts.append("no_redirect")
        return ".".join(parts)


ALL_VARIANTS: tuple[TransportVariant, ...] = (
    TransportVariant(ignore_certificate_errors=False, follow_redirects=True),
    TransportVariant(ignore_certificate_errors=False, follow_redirects=False),
    TransportVariant(ignore_certificate_errors=True, follow_redirects=True),
    TransportVariant(ignore_certificate_errors=True, follow_redirects=False),
)


class TransportRegistry:
    """Fixed registry of four shared ``httpx.AsyncClient`` instances.

    Clients are created once and are safe for concurrent use by many
    in-flight calls. Timeouts are applied per request, so clients carry none.
    """

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        """Create the clients.

        Args:
            transport: Optional transport shared by every client, mainly for
                tests (e.g. ``httpx.MockTransport``).
        """
        self._clients: dict[TransportVariant, httpx.AsyncClient] = {
            variant: _create_client(variant, transport) for variant in ALL_VARIANTS
        }

    def get(
        self, ignore_certificate_errors: bool, follow_redirects: bool
    ) -> httpx.AsyncClient:
        """Return the client for a certificate/redirect combination."""
        variant = TransportVariant(ignore_certificate_errors, follow_redirects)
        return self._clients[variant]

    def __len__(self) -> int:
        return len(self._clients)

    async def aclose(self) -> None:
        """Close every client."""
        for client in self._clients.values():
            await client.aclose()


def _create_client(
    variant: TransportVariant, transport: httpx.AsyncBaseTransport | None
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        verify=not variant.ignore_certificate_errors,
        follow_redirects=variant.follow_redirects,
        timeout=None,
        transport=transport,
    )
