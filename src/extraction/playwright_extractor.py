# src/extraction/playwright_extractor.py — v1
"""Headless-browser content extractor backed by Playwright.

One browser is launched lazily and reused for every extract() call; each
call opens and closes its own page.
"""

from __future__ import annotations

import logging
from typing import Any

from criteriacache.criteria.models import NormalizedCriteria
from criteriacache.extraction.base_extractor import (
    ContentExtractor,
    ExtractionError,
    has_required_fields,
)
from criteriacache.extraction.result_parser import assemble_payload, build_url

logger = logging.getLogger(__name__)

_BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]

_EXTRACT_JS = """
() => {
    const html = (sel) => {
        const el = document.querySelector(sel);
        return el ? el.innerHTML : null;
    };
    const data = {
        numbers: Array.from(document.querySelectorAll('.result-number'))
            .map(el => el.textContent.trim()),
        population_html: html('.population-visualizer'),
        paragraph_html: html('.paragraph'),
        score_flex_html: html('.score-flex'),
        list_items: [],
    };
    for (const sel of ['.box.paragraph ul li', '.box ul li', '.paragraph ul li', 'ul li']) {
        const items = document.querySelectorAll(sel);
        if (items.length > 0) {
            data.list_items = Array.from(items).map(el => el.outerHTML);
            break;
        }
    }
    return data;
}
"""


class PlaywrightExtractor(ContentExtractor):
    """Render the result page in Chromium and scrape the result fields."""

    def __init__(
        self,
        base_url: str,
        navigation_timeout_s: float = 45.0,
        render_wait_s: float = 8.0,
        headless: bool = True,
    ) -> None:
        self._base_url = base_url
        self._navigation_timeout_ms = int(navigation_timeout_s * 1000)
        self._render_wait_ms = int(render_wait_s * 1000)
        self._headless = headless
        self._playwright: Any = None
        self._browser: Any = None

    async def extract(self, criteria: NormalizedCriteria) -> dict[str, Any]:
        from playwright.async_api import Error as PlaywrightError
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        url = build_url(self._base_url, criteria)
        browser = await self._ensure_browser()
        page = await browser.new_page()
        try:
            await page.goto(
                url, wait_until="domcontentloaded", timeout=self._navigation_timeout_ms,
            )
            await page.wait_for_timeout(self._render_wait_ms)
            raw = await page.evaluate(_EXTRACT_JS)
        except PlaywrightTimeoutError as e:
            raise ExtractionError("timeout", f"Timed out loading {url}: {e}") from e
        except PlaywrightError as e:
            raise ExtractionError("navigation", f"Navigation failed for {url}: {e}") from e
        finally:
            await page.close()

        payload = assemble_payload(raw or {})
        if not has_required_fields(payload):
            raise ExtractionError("empty-result", f"No valid results found on {url}")
        logger.debug("Extracted %s from %s", sorted(payload), url)
        return payload

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def _ensure_browser(self) -> Any:
        if self._browser is None:
            from playwright.async_api import async_playwright

            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless, args=_BROWSER_ARGS,
            )
            logger.info("Launched Chromium (headless=%s)", self._headless)
        return self._browser
