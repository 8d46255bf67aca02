"""Unit tests for the per-supplier HTTP client."""
import httpx
import pytest

from catalog_enricher.errors.exceptions import SupplierConnectionError
from catalog_enricher.services.cancellation import CancellationToken
from catalog_enricher.services.http_client import SupplierHttpClient


def make_client(handler, **kwargs):
    return SupplierHttpClient("SECO", transport=httpx.MockTransport(handler), **kwargs)


class TestSupplierHttpClient:
    """Test status handling and transport errors."""

    @pytest.mark.asyncio
    async def test_fetch_html(self):
        seen = {}

        def handler(request):
            seen["user_agent"] = request.headers["User-Agent"]
            return httpx.Response(200, text="<p>ok</p>")

        async with make_client(handler, user_agent="catalog-test/1.0") as client:
            html = await client.fetch_html("https://www.secotools.com/x", CancellationToken())

        assert html == "<p>ok</p>"
        assert seen["user_agent"] == "catalog-test/1.0"

    @pytest.mark.asyncio
    async def test_non_200_is_not_loaded(self):
        client = make_client(lambda request: httpx.Response(503, text="busy"))
        try:
            assert await client.fetch_html("https://www.secotools.com/x") is None
            assert await client.fetch_document("https://www.secotools.com/x") is None
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_fetch_document(self):
        client = make_client(
            lambda request: httpx.Response(200, text="<table><tr><td>DC</td><td>10 mm</td></tr></table>")
        )
        try:
            doc = await client.fetch_document("https://www.secotools.com/x")
        finally:
            await client.aclose()

        assert doc.url == "https://www.secotools.com/x"
        assert doc.table_rows() == [["DC", "10 mm"]]

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("name resolution failed")

        client = make_client(handler)
        with pytest.raises(SupplierConnectionError) as exc_info:
            await client.fetch_html("https://www.secotools.com/x")
        await client.aclose()

        assert exc_info.value.message.startswith("ConnectError for https://www.secotools.com/x")
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_aclose_is_idempotent(self):
        client = make_client(lambda request: httpx.Response(200))
        await client.aclose()
        await client.aclose()
