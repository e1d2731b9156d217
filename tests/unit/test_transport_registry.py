"""Unit tests for the shared client registry."""

import asyncio

import httpx
import pytest

from httpexec.transport import ALL_VARIANTS, TransportRegistry, TransportVariant


class TestTransportVariant:
    """Tests for TransportVariant naming."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("variant", "expected"),
        [
            (TransportVariant(False, True), "http_executor"),
            (TransportVariant(False, False), "http_executor.no_redirect"),
            (TransportVariant(True, True), "http_executor.ignore_certs"),
            (TransportVariant(True, False), "http_executor.ignore_certs.no_redirect"),
        ],
    )
    def test_names(self, variant: TransportVariant, expected: str) -> None:
        """Test stable client names."""
        assert variant.name == expected

    @pytest.mark.unit
    def test_four_variants(self) -> None:
        """Test that every combination is covered once."""
        assert len(set(ALL_VARIANTS)) == 4


class TestTransportRegistry:
    """Tests for TransportRegistry."""

    def test_clients_match_their_variant(self) -> None:
        """Test that each lookup returns a matching, reused client."""

        async def run() -> None:
            registry = TransportRegistry()
            try:
                assert len(registry) == 4
                for ignore_certs, follow in ALL_VARIANTS:
                    client = registry.get(ignore_certs, follow)
                    assert client.follow_redirects is follow
                    assert registry.get(ignore_certs, follow) is client
                assert registry.get(True, True) is not registry.get(False, True)
            finally:
                await registry.aclose()

        asyncio.run(run())

    def test_shared_transport_is_used(self) -> None:
        """Test that an injected transport serves every client."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(204)

        async def run() -> None:
            registry = TransportRegistry(transport=httpx.MockTransport(handler))
            try:
                response = await registry.get(True, False).get("https://x.test/a")
                assert response.status_code == 204
            finally:
                await registry.aclose()

        asyncio.run(run())
        assert seen == ["https://x.test/a"]
