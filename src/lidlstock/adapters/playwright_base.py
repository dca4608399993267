from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import Any

from playwright.sync_api import Browser, BrowserContext, Error as PlaywrightError, Playwright, sync_playwright

from lidlstock.adapters.base import PageStateRenderer, RenderError

LOG = logging.getLogger(__name__)

# The product data is injected into window.__NUXT__ after hydration. The entry
# is round-tripped through JSON so nothing returned is tied to the live page.
STATE_SCRIPT = """
(key) => {
  const nuxt = window.__NUXT__;
  if (!nuxt || !nuxt.data) return null;
  const entry = nuxt.data[key];
  return entry === undefined ? null : JSON.parse(JSON.stringify(entry));
}
"""


class PlaywrightPageRenderer(PageStateRenderer):
    blocked_resource_types = {"image", "media", "font"}

    def __init__(self, headless: bool = True, timeout_ms: int = 30000) -> None:
        self.headless = headless
        self.timeout_ms = timeout_ms
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    def __enter__(self) -> "PlaywrightPageRenderer":
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=self.headless)
            self._context = self._browser.new_context()
            self._context.route("**/*", self._route_filter)
        except PlaywrightError as exc:
            try:
                self._release()
            except RenderError as cleanup_exc:
                LOG.warning("%s", cleanup_exc)
            raise RenderError(f"failed to start browser: {exc}") from exc
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._release()

    def _release(self) -> None:
        context, browser, playwright = self._context, self._browser, self._playwright
        self._context = self._browser = self._playwright = None
        try:
            # Callbacks run last-in first-out and every one runs even if an earlier one raises.
            with ExitStack() as stack:
                if playwright:
                    stack.callback(playwright.stop)
                if browser:
                    stack.callback(browser.close)
                if context:
                    stack.callback(context.close)
        except PlaywrightError as exc:
            raise RenderError(f"failed to release browser: {exc}") from exc

    def _route_filter(self, route) -> None:  # type: ignore[no-untyped-def]
        if route.request.resource_type in self.blocked_resource_types:
            route.abort()
            return
        route.continue_()

    def render_state(self, url: str, state_key: str) -> Any:
        if not self._context:
            raise RuntimeError("renderer context is not initialized")

        try:
            page = self._context.new_page()
            try:
                LOG.debug("rendering %s", url)
                page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
                return page.evaluate(STATE_SCRIPT, state_key)
            finally:
                page.close()
        except PlaywrightError as exc:
            raise RenderError(f"failed to render {url}: {exc}") from exc
