"""Sandvik Coromant strategy.

Product pages are client-rendered; the direct product-details URL is opened
in the browser first. Labels are matched in full ("Corner radius(RE)") since
the short codes collide with ordinary words on these pages.
"""
import re
from typing import Optional
from urllib.parse import quote

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from catalog_enricher.config import settings
from catalog_enricher.models.catalog import ToolFamily
from catalog_enricher.models.record import ToolRecord
from catalog_enricher.models.spec_result import SpecResult
from catalog_enricher.services.cancellation import CancellationToken
from catalog_enricher.services.extraction.heuristics import Document, section_after
from catalog_enricher.services.suppliers.base import SupplierStrategy

PRODUCT_DETAILS_URL = "https://www.sandvik.coromant.com/en-us/product-details?c="
PRODUCT_DATA_MARKER = "Product data"
READY_TEXT = "Cutting diameter"

_DIAMETER = ("Cutting diameter(DC)",)
_OVERALL = ("Overall length(OAL)", "Functional length(LF)")
_SHANK = ("Connection diameter machine side(DCONMS)",)


class SandvikStrategy(SupplierStrategy):
    identity = "SANDVIK"
    base_url = "https://www.sandvik.coromant.com/en-us"
    search_url = "https://www.sandvik.coromant.com/en-us/search/?q="
    attempt_timeout = 60.0
    render_budget = 45.0
    metric_only = True
    sufficient_slots = ("cutting_length", "overall_length", "edge_count", "shank_bore_diameter")
    product_link_markers = ("/product", "product-details")
    max_link_candidates = 30
    code_window = 80

    aliases = {
        ToolFamily.MILLING: {
            "tool_diameter": _DIAMETER,
            "cutting_length": ("Depth of cut maximum(APMX)",),
            "corner_radius": ("Corner radius(RE)",),
            "edge_count": ("Peripheral effective cutting edge count(ZEFP)",),
            "overall_length": _OVERALL,
            "shank_bore_diameter": _SHANK,
        },
        ToolFamily.DRILLING: {
            "tool_diameter": _DIAMETER,
            "cutting_length": ("Usable length(LU)",),
            "overall_length": _OVERALL,
            "shank_bore_diameter": _SHANK,
        },
    }

    def search_query(self, record: ToolRecord) -> str:
        return re.sub(r"\s+", " ", record.tool_description.strip())

    def extract_from_document(self, doc: Document, family: ToolFamily) -> SpecResult:
        """Static pages carry the same labelled product data block as rendered ones."""
        return self.scan_rendered_text(doc.text, family)

    def scan_rendered_text(self, text: str, family: ToolFamily) -> SpecResult:
        body = section_after(text, PRODUCT_DATA_MARKER, required=READY_TEXT)
        return super().scan_rendered_text(body, family)

    async def render_product_text(
        self, record: ToolRecord, token: CancellationToken
    ) -> Optional[str]:
        url = PRODUCT_DETAILS_URL + quote(self.search_query(record))
        async with self.browser.page() as page:
            await page.goto(url, wait_until="networkidle", timeout=settings.render_timeout_ms)
            await page.get_by_text(READY_TEXT, exact=False).first.wait_for(timeout=15000)
            token.raise_if_cancelled()

            try:
                await page.get_by_role("tab", name="Metric", exact=True).click(timeout=3000)
                await token.sleep(0.8)
            except PlaywrightTimeoutError:
                self._log.debug("metric_tab_not_found", url=url)
            except PlaywrightError as e:
                self._log.debug("metric_tab_click_failed", url=url, error=str(e).splitlines()[0])

            return await page.inner_text("body")
