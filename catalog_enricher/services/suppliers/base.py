"""
Supplier strategy interface.

All supplier strategies implement this interface. The orchestrator only
knows ``identity`` and ``fetch_specs``; everything else is shared machinery
for the attempt chain:

    1. direct lookup     known description -> product URL, static fetch
    2. rendered          headless browser navigation, visible text scan
    3. static search     search page -> product link -> product page
    4. search fallback   heuristics applied to the search page itself

The chain stops at the first step whose result ``has_enough_data``.
Transport failures (SupplierConnectionError) propagate to the retry
envelope; browser failures only skip the rendered step.
"""
import asyncio
import re
from abc import ABC
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import quote, urljoin

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from catalog_enricher.config import settings
from catalog_enricher.errors.exceptions import RenderError
from catalog_enricher.models.catalog import (
    DRILL_EDGE_COUNT,
    NA,
    NOT_APPLICABLE,
    SLOT_FIELDS,
    ToolFamily,
)
from catalog_enricher.models.record import ToolRecord
from catalog_enricher.models.spec_result import SpecResult
from catalog_enricher.services.browser import BrowserLauncher
from catalog_enricher.services.cancellation import CancellationToken
from catalog_enricher.services.extraction.heuristics import (
    CODE_WINDOW,
    AttributeQuery,
    Document,
    extract_attribute,
    find_code_value,
)
from catalog_enricher.services.http_client import SupplierHttpClient

logger = structlog.get_logger(__name__)

# slot name -> candidate labels, most specific first
AliasMap = Dict[str, Tuple[str, ...]]

SEARCH_INPUT_SELECTORS: Tuple[str, ...] = (
    "input[type='search']",
    "input[name='q']",
    "input[name*='search' i]",
    "input[placeholder*='search' i]",
    "input[aria-label*='search' i]",
)

SEARCH_TOGGLE_SELECTORS: Tuple[str, ...] = (
    "button[aria-label*='search' i]",
    "[class*='search-toggle']",
    "[class*='search-icon']",
    "a[href*='search']",
)

FORCE_VISIBLE_JS = """el => {
    el.removeAttribute('hidden');
    el.style.display = 'block';
    el.style.visibility = 'visible';
    el.style.opacity = '1';
}"""

_KEYWORD_SPLIT_RE = re.compile(r"\s+")


def pick_product_link(
    links: Iterable[Tuple[str, str]],
    description: str,
    markers: Sequence[str],
    max_candidates: int,
    base_url: str = "",
    first_only: bool = False,
) -> Optional[str]:
    """Choose the most plausible product link from a search result page.

    Only hrefs containing one of ``markers`` are candidates, at most
    ``max_candidates`` of them. The candidate whose text + URL shares the
    most keywords with the description wins; ties keep page order. Without
    any overlap the first candidate is returned.

    Returns:
        Absolute URL, or None when the page has no candidate link
    """
    candidates: List[Tuple[str, str]] = []
    seen = set()
    for href, text in links:
        if not href or not any(m.lower() in href.lower() for m in markers):
            continue
        url = urljoin(base_url, href) if base_url else href
        if url in seen:
            continue
        seen.add(url)
        candidates.append((url, text))
        if len(candidates) >= max_candidates:
            break

    if not candidates:
        return None
    if first_only:
        return candidates[0][0]

    keywords = [k for k in _KEYWORD_SPLIT_RE.split(description.upper()) if k]
    best_url, best_score = candidates[0][0], 0
    for url, text in candidates:
        haystack = f"{text} {url}".upper()
        score = sum(1 for k in keywords if k in haystack)
        if score > best_score:
            best_url, best_score = url, score
    return best_url


class SupplierStrategy(ABC):
    """Base class for supplier resolution strategies.

    Subclasses declare their site and vocabulary as class attributes and
    override individual steps where the site needs it.

    Attributes:
        identity: Supplier identity handled (e.g. "SECO")
        base_url: Site entry page used by the rendered step
        search_url: Static search URL prefix, or None to skip static search
        attempt_timeout: Per-attempt deadline request, None for the default
        sufficient_slots: Any of these resolved means the step succeeded
        product_link_markers: Substrings identifying product links
        first_link_only: Take the first product link instead of ranking
        max_link_candidates: Candidate cap, None for the configured default
        metric_only: Site values are taken as metric regardless of settings
        aliases: Labels per slot for each tool family
        code_window: Characters scanned after a label in page text
        render_budget: Deadline of the rendered step in seconds, None for the
            configured default. Kept below the attempt deadline so a stalled
            browser leaves time for the static steps.
    """

    identity: str = ""
    base_url: str = ""
    search_url: Optional[str] = None
    attempt_timeout: Optional[float] = None
    sufficient_slots: Tuple[str, ...] = ("tool_diameter", "overall_length", "corner_radius")
    product_link_markers: Tuple[str, ...] = ("/product",)
    first_link_only: bool = False
    max_link_candidates: Optional[int] = None
    metric_only: bool = False
    aliases: Dict[ToolFamily, AliasMap] = {}
    code_window: int = CODE_WINDOW
    render_budget: Optional[float] = None

    def __init__(
        self,
        http: Optional[SupplierHttpClient] = None,
        browser: Optional[BrowserLauncher] = None,
        known_targets: Optional[Dict[str, str]] = None,
        metric_only: Optional[bool] = None,
        browser_enabled: Optional[bool] = None,
    ):
        """
        Args:
            http: Transport for static fetches (one per supplier)
            browser: Shared browser launcher; None disables rendering
            known_targets: Upper-cased description -> product URL
            metric_only: Reject non-metric values (defaults to config)
            browser_enabled: Enable the rendered step (defaults to config)
        """
        self.http = http or SupplierHttpClient(self.identity)
        self.browser = browser
        self.known_targets = known_targets or {}
        self._metric_only = settings.metric_only if metric_only is None else metric_only
        self.browser_enabled = (
            settings.browser_enabled if browser_enabled is None else browser_enabled
        )
        self._log = logger.bind(supplier=self.identity)

    @property
    def is_metric_only(self) -> bool:
        return self.metric_only or self._metric_only

    @property
    def link_candidate_cap(self) -> int:
        return self.max_link_candidates or settings.max_link_candidates

    @property
    def render_step_timeout(self) -> float:
        return self.render_budget or settings.render_step_timeout

    async def aclose(self) -> None:
        await self.http.aclose()

    # =========================================================================
    # Contract
    # =========================================================================

    async def fetch_specs(self, record: ToolRecord, token: CancellationToken) -> SpecResult:
        """Resolve one record through the attempt chain.

        Returns:
            A sufficient result with family rules applied, or a failed result

        Raises:
            SupplierConnectionError: Transport failure (retried by the envelope)
            asyncio.CancelledError: Job cancelled
        """
        family = record.tool_family or ToolFamily.MILLING
        log = self._log.bind(description=record.tool_description, family=family.value)
        reason: Optional[str] = None

        steps = (
            ("direct_lookup", self.direct_lookup),
            ("rendered", self.rendered_navigation),
            ("static_search", self.static_search),
        )
        for name, step in steps:
            token.raise_if_cancelled()
            result = await step(record, family, token)
            if result is None:
                continue
            if self.has_enough_data(result):
                log.info("supplier_specs_resolved", step=name, slots=result.slots())
                return self.apply_family_rules(result, family)
            log.debug("supplier_step_insufficient", step=name, error=result.error_message)
            if result.error_message:
                reason = result.error_message

        return SpecResult.failed(reason or f"Could not extract {self.identity} specs")

    def has_enough_data(self, result: SpecResult) -> bool:
        return any(result.has_value(slot) for slot in self.sufficient_slots)

    @staticmethod
    def apply_family_rules(result: SpecResult, family: ToolFamily) -> SpecResult:
        """Drilling tools have no corner radius and a fixed edge count."""
        if family is ToolFamily.DRILLING:
            return result.model_copy(
                update={"corner_radius": NOT_APPLICABLE, "edge_count": DRILL_EDGE_COUNT}
            )
        return result

    # =========================================================================
    # Steps
    # =========================================================================

    async def direct_lookup(
        self, record: ToolRecord, family: ToolFamily, token: CancellationToken
    ) -> Optional[SpecResult]:
        url = self.known_targets.get(record.tool_description.strip().upper())
        if not url:
            return None
        doc = await self.http.fetch_document(url, token)
        if doc is None:
            return SpecResult.failed("Could not load product page")
        return self.extract_from_document(doc, family)

    async def rendered_navigation(
        self, record: ToolRecord, family: ToolFamily, token: CancellationToken
    ) -> Optional[SpecResult]:
        if not self.browser_enabled or self.browser is None:
            return None
        try:
            text = await asyncio.wait_for(
                self.render_product_text(record, token), timeout=self.render_step_timeout
            )
        except asyncio.TimeoutError:
            self._log.warning(
                "rendered_step_timed_out",
                description=record.tool_description,
                timeout=self.render_step_timeout,
            )
            return None
        except (PlaywrightError, RenderError) as e:
            self._log.warning(
                "rendered_step_failed",
                description=record.tool_description,
                error=str(e).splitlines()[0] if str(e) else type(e).__name__,
            )
            return None
        if not text:
            return None
        return self.scan_rendered_text(text, family)

    async def static_search(
        self, record: ToolRecord, family: ToolFamily, token: CancellationToken
    ) -> Optional[SpecResult]:
        if not self.search_url:
            return None
        search_url = self.search_url + quote(self.search_query(record))
        search_doc = await self.http.fetch_document(search_url, token)
        if search_doc is None:
            return SpecResult.failed("Could not load search page")

        product_url = pick_product_link(
            search_doc.links(),
            record.tool_description,
            self.product_link_markers,
            self.link_candidate_cap,
            base_url=search_url,
            first_only=self.first_link_only,
        )
        if product_url:
            product_doc = await self.http.fetch_document(product_url, token)
            if product_doc is not None:
                result = self.extract_from_document(product_doc, family)
                if self.has_enough_data(result):
                    return result

        return self.extract_from_document(search_doc, family)

    # =========================================================================
    # Extraction hooks
    # =========================================================================

    def search_query(self, record: ToolRecord) -> str:
        return record.tool_description.strip()

    def aliases_for(self, family: ToolFamily) -> AliasMap:
        return self.aliases.get(family, {})

    def extract_from_document(self, doc: Document, family: ToolFamily) -> SpecResult:
        """Run the heuristic pipeline for every slot the family maps."""
        slots = {}
        for slot, labels in self.aliases_for(family).items():
            query = AttributeQuery.for_aliases(
                labels,
                metric_only=self.is_metric_only,
                count_like=True if slot == "edge_count" else None,
            )
            slots[slot] = extract_attribute(doc, query) or NA
        return self._result(slots)

    def scan_rendered_text(self, text: str, family: ToolFamily) -> SpecResult:
        """Code-anchored scan of a rendered page's visible text."""
        slots = {}
        for slot, labels in self.aliases_for(family).items():
            value = None
            for label in labels:
                value = find_code_value(
                    text,
                    label,
                    metric_only=self.is_metric_only,
                    count_like=slot == "edge_count",
                    window=self.code_window,
                )
                if value:
                    break
            slots[slot] = value or NA
        return self._result(slots)

    def _result(self, slots: Dict[str, str]) -> SpecResult:
        values = {name: slots.get(name, NA) for name in SLOT_FIELDS}
        result = SpecResult(**values)
        return result.model_copy(update={"success": self.has_enough_data(result)})

    # =========================================================================
    # Rendering
    # =========================================================================

    async def render_product_text(
        self, record: ToolRecord, token: CancellationToken
    ) -> Optional[str]:
        """Navigate the site like a user and return the product page's text.

        Entry page -> search input -> submit -> best product link -> body text.
        """
        timeout = settings.render_timeout_ms
        async with self.browser.page() as page:
            await page.goto(self.base_url, wait_until="domcontentloaded", timeout=timeout)
            token.raise_if_cancelled()

            search_input = await self._reveal_search_input(page)
            if search_input is None:
                self._log.debug("search_input_not_found", url=self.base_url)
                return None

            await search_input.fill(self.search_query(record), force=True)
            await search_input.press("Enter")
            await page.wait_for_load_state("networkidle", timeout=timeout)
            token.raise_if_cancelled()

            links = await page.eval_on_selector_all(
                "a[href]", "els => els.map(e => [e.href, e.innerText || ''])"
            )
            product_url = pick_product_link(
                [(href, text) for href, text in links],
                record.tool_description,
                self.product_link_markers,
                self.link_candidate_cap,
                base_url=page.url,
                first_only=self.first_link_only,
            )
            if not product_url:
                return None

            await page.goto(product_url, wait_until="networkidle", timeout=timeout)
            token.raise_if_cancelled()
            return await page.inner_text("body")

    async def _reveal_search_input(self, page: Page) -> Optional[Locator]:
        """Find the site search box, making it visible if the site hides it."""
        for selector in SEARCH_INPUT_SELECTORS:
            search_input = page.locator(selector).first
            if await search_input.count() == 0:
                continue
            if await search_input.is_visible():
                return search_input

            for toggle_selector in SEARCH_TOGGLE_SELECTORS:
                toggle = page.locator(toggle_selector).first
                if await toggle.count() and await toggle.is_visible():
                    await toggle.click(timeout=3000)
                    break
            if not await search_input.is_visible():
                await search_input.evaluate(FORCE_VISIBLE_JS)
            return search_input
        return None
