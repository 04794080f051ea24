"""
E2E Test Fixtures - Real infrastructure configuration.

This module extends the global conftest.py with E2E-specific fixtures:
- A started BrowserTester per test (server readiness + browser session)
- A node client for funding and mining
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio

from paytester.connectors.explorer_rpc import ExplorerNodeClient, create_default_client
from paytester.core.browser_tester import BrowserTester


@pytest_asyncio.fixture
async def harness(request: pytest.FixtureRequest) -> AsyncGenerator[BrowserTester, None]:
    """
    Started harness scoped to the requesting test.

    The browser lands on the registration page. The server and browser are
    released after the test, and also when start() itself fails part way.
    """
    async with BrowserTester.create(scope=request.node.name) as tester:
        yield tester


@pytest_asyncio.fixture
async def node_client() -> AsyncGenerator[ExplorerNodeClient, None]:
    """RPC client for the regtest node backing the server."""
    client = create_default_client()
    try:
        yield client
    finally:
        await client.aclose()
