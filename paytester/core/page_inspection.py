"""
Page inspection helpers.

Detects pages the application renders when something went wrong: the raw
exception page (no layout, so no navbar brand) and pages showing a danger
status banner. Also collects uncaught JavaScript errors raised by a page.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from paytester.errors import HarnessAssertionError

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

JS_ERROR_TYPES = (
    "SyntaxError",
    "EvalError",
    "ReferenceError",
    "RangeError",
    "TypeError",
    "URIError",
)


async def is_error_page(page: "Page") -> str | None:
    """Return a description of the error the page shows, or None."""
    # Callers inspect right after clicks that navigate
    await page.wait_for_load_state()
    if await page.locator(".navbar-brand").count() == 0:
        return "page layout not rendered"

    dangers = page.locator(".alert-danger")
    for i in range(await dangers.count()):
        banner = dangers.nth(i)
        if await banner.is_visible():
            text = (await banner.inner_text()).strip()
            return f"error banner displayed: {text}"
    return None


async def assert_no_error(page: "Page") -> None:
    """
    Raises:
        HarnessAssertionError: the current page is an error page.
    """
    problem = await is_error_page(page)
    if problem is not None:
        raise HarnessAssertionError(f"Error page at {page.url}: {problem}")


class JsErrorCollector:
    """
    Records ``pageerror`` events of a page.

    Usage:
        collector = JsErrorCollector()
        collector.attach(page)
        ...
        collector.assert_no_js_errors()
    """

    def __init__(self) -> None:
        self.messages: list[str] = []

    def attach(self, page: "Page") -> None:
        page.on("pageerror", self._on_page_error)

    def _on_page_error(self, error: Any) -> None:
        name = getattr(error, "name", "") or ""
        message = getattr(error, "message", None) or str(error)
        self.messages.append(f"{name}: {message}" if name else message)

    def js_errors(self) -> list[str]:
        return [m for m in self.messages if any(t in m for t in JS_ERROR_TYPES)]

    def clear(self) -> None:
        self.messages.clear()

    def assert_no_js_errors(self) -> None:
        errors = self.js_errors()
        if errors:
            logger.info("JavaScript error(s):\n%s", "\n".join(errors))
            raise HarnessAssertionError(f"JavaScript errors on page: {errors}")
