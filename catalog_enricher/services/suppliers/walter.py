"""Walter strategy.

The Walter site is a single-page app without a usable static search: specs
only exist in the rendered product view, as tab-separated rows of
"Description<TAB>Symbol<TAB>Value". Symbols are case-sensitive (l1 vs L1).
"""
from typing import Optional
from urllib.parse import quote

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from catalog_enricher.config import settings
from catalog_enricher.models.catalog import NA, ToolFamily
from catalog_enricher.models.record import ToolRecord
from catalog_enricher.models.spec_result import SpecResult
from catalog_enricher.services.cancellation import CancellationToken
from catalog_enricher.services.extraction.heuristics import find_tab_row_value
from catalog_enricher.services.suppliers.base import SupplierStrategy

PRODUCT_URL = "https://www.walter-tools.com/en-us/search/product/"
SPEC_ROW_MARKER = "\tDc\t"
NAVIGATION_TIMEOUT_MS = 30000


class WalterStrategy(SupplierStrategy):
    identity = "WALTER"
    base_url = "https://www.walter-tools.com/en-us"
    attempt_timeout = 90.0
    render_budget = 75.0

    aliases = {
        ToolFamily.MILLING: {
            "tool_diameter": ("Dc",),
            "cutting_length": ("Lc",),
            "corner_radius": ("R",),
            "edge_count": ("Z",),
            "overall_length": ("l1",),
            "shank_bore_diameter": ("d1",),
        },
        ToolFamily.DRILLING: {
            "tool_diameter": ("Dc",),
            "cutting_length": ("Lc",),
            "overall_length": ("l1",),
            "shank_bore_diameter": ("d1",),
        },
    }

    def scan_rendered_text(self, text: str, family: ToolFamily) -> SpecResult:
        slots = {}
        for slot, codes in self.aliases_for(family).items():
            value = None
            for code in codes:
                value = find_tab_row_value(
                    text,
                    code,
                    metric_only=self.is_metric_only,
                    count_like=slot == "edge_count",
                )
                if value:
                    break
            slots[slot] = value or NA
        return self._result(slots)

    async def render_product_text(
        self, record: ToolRecord, token: CancellationToken
    ) -> Optional[str]:
        url = PRODUCT_URL + quote(record.tool_description.strip().lower())
        async with self.browser.page() as page:
            await page.goto(url, wait_until="domcontentloaded", timeout=NAVIGATION_TIMEOUT_MS)
            try:
                await page.wait_for_function(
                    "marker => document.body.innerText.includes(marker)",
                    arg=SPEC_ROW_MARKER,
                    timeout=settings.render_settle_ms + 5000,
                )
            except PlaywrightTimeoutError:
                self._log.debug("spec_rows_not_rendered", url=url)
            token.raise_if_cancelled()
            return await page.inner_text("body")
