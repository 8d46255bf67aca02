"""Shared headless Chromium for the rendered navigation step.

One browser process is launched lazily and reused by every strategy; each
rendered attempt gets its own context (cookies, storage) which is closed when
the attempt ends, including on timeout or cancellation.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from catalog_enricher.config import settings
from catalog_enricher.errors.exceptions import RenderError

logger = structlog.get_logger(__name__)


class BrowserLauncher:
    """
    Lazily launched, shared Playwright browser.

    Usage:
        launcher = BrowserLauncher()
        async with launcher.page() as page:
            await page.goto(url, wait_until="networkidle")
            text = await page.inner_text("body")
        await launcher.aclose()
    """

    def __init__(self, headless: Optional[bool] = None, user_agent: Optional[str] = None):
        self.headless = settings.headless if headless is None else headless
        self.user_agent = user_agent or settings.user_agent
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()
        self._log = logger.bind(component="BrowserLauncher", headless=self.headless)

    async def browser(self) -> Browser:
        """Return the shared browser, launching it on first use."""
        async with self._lock:
            if self._browser is not None and self._browser.is_connected():
                return self._browser
            try:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(headless=self.headless)
            except PlaywrightError as e:
                self._log.error("browser_launch_failed", error=str(e))
                raise RenderError(f"Browser launch failed: {e}") from e
            self._log.info("browser_launched")
            return self._browser

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """A fresh page in an isolated context, closed on exit."""
        browser = await self.browser()
        try:
            context = await browser.new_context(
                user_agent=self.user_agent,
                viewport={"width": 1920, "height": 1080},
                locale="en-US",
            )
        except PlaywrightError as e:
            raise RenderError(f"Browser context failed: {e}") from e
        try:
            page = await context.new_page()
            yield page
        finally:
            await context.close()

    async def aclose(self) -> None:
        async with self._lock:
            if self._browser is not None:
                await self._browser.close()
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
                self._log.info("browser_closed")
