"""Per-supplier HTTP transport.

Each supplier gets its own httpx.AsyncClient so that headers, cookies and
connection pools never leak between sites. Responses other than 200 are
reported as "not loaded" (None); only transport failures raise.
"""
from typing import Optional

import httpx
import structlog

from catalog_enricher.config import settings
from catalog_enricher.errors.exceptions import SupplierConnectionError
from catalog_enricher.services.cancellation import CancellationToken
from catalog_enricher.services.extraction.heuristics import Document

logger = structlog.get_logger(__name__)


class SupplierHttpClient:
    """
    Async HTTP client for one supplier site.

    Usage:
        async with SupplierHttpClient("SECO") as client:
            doc = await client.fetch_document("https://www.secotools.com/search?q=x")
    """

    def __init__(
        self,
        supplier: str,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            supplier: Supplier identity, used for logging only
            timeout: Read timeout in seconds (defaults to config)
            user_agent: User-Agent header (defaults to config)
            transport: Custom transport (httpx.MockTransport in tests)
        """
        self.supplier = supplier
        self.timeout = httpx.Timeout(
            connect=5.0,
            read=timeout or settings.request_timeout,
            write=5.0,
            pool=5.0,
        )
        self._user_agent = user_agent or settings.user_agent
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._log = logger.bind(supplier=supplier)

    async def __aenter__(self) -> "SupplierHttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazily created underlying client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
                headers={
                    "User-Agent": self._user_agent,
                    "Accept": "text/html,application/xhtml+xml",
                    "Accept-Language": "en-US,en;q=0.9",
                },
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_html(
        self, url: str, token: Optional[CancellationToken] = None
    ) -> Optional[str]:
        """GET a page and return its body, or None when the status is not 200.

        Raises:
            SupplierConnectionError: Connection, DNS or read failure
            asyncio.CancelledError: Token fired while the request was in flight
        """
        try:
            request = self.client.get(url)
            response = await (token.run(request) if token else request)
        except httpx.TransportError as e:
            self._log.warning("supplier_request_failed", url=url, error=str(e))
            raise SupplierConnectionError(f"{type(e).__name__} for {url}: {e}") from e

        if response.status_code != 200:
            self._log.info("supplier_page_not_loaded", url=url, status=response.status_code)
            return None

        self._log.debug("supplier_page_loaded", url=url, bytes=len(response.content))
        return response.text

    async def fetch_document(
        self, url: str, token: Optional[CancellationToken] = None
    ) -> Optional[Document]:
        """Fetch and parse a page; None when it could not be loaded."""
        html = await self.fetch_html(url, token)
        if html is None:
            return None
        return Document.from_html(html, url=str(url))
