"""
Shared fixtures for browser E2E tests.

Captures a full-page screenshot of the harness page when a test fails.

Prerequisites:
    pip install -e .[test]
    playwright install chromium

Run with: E2E_TEST=1 pytest tests/e2e/browser/ -v
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import pytest_asyncio

from paytester.config import settings
from paytester.core.browser_tester import BrowserTester

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Screenshot-on-failure hook
# ---------------------------------------------------------------------------


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Store test result so the screenshot fixture can check for failure."""
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


@pytest_asyncio.fixture(autouse=True)
async def _capture_screenshot_on_failure(harness: BrowserTester, request):
    """Capture a full-page screenshot when a test fails."""
    yield

    rep = getattr(request.node, "rep_call", None)
    if rep is not None and rep.failed:
        screenshot_dir = Path(settings.SCREENSHOT_DIR)
        screenshot_dir.mkdir(parents=True, exist_ok=True)
        safe_name = request.node.name.replace("/", "_").replace(":", "_")
        path = screenshot_dir / f"{safe_name}.png"
        try:
            await harness.page.screenshot(path=str(path), full_page=True)
        except Exception as exc:
            logger.warning(f"Could not capture screenshot {path}: {exc}")
