"""
Explorer Node RPC Client

Async JSON-RPC client for the blockchain node backing the server-under-test.
Used to fund store wallets and mine blocks during tests.
"""

import logging
from decimal import Decimal
from itertools import count
from typing import Any, List, Optional

import httpx

from paytester.config import settings
from paytester.errors import ExplorerRpcError

logger = logging.getLogger(__name__)


class ExplorerNodeClient:
    """
    Minimal bitcoind-compatible JSON-RPC client over httpx.
    """

    def __init__(
        self,
        url: str,
        user: str,
        password: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the RPC client.

        Args:
            url: RPC endpoint of the node
            user: RPC username
            password: RPC password
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.url = url
        self._ids = count(1)
        self._client = httpx.AsyncClient(
            auth=(user, password),
            timeout=timeout,
            transport=transport,
        )

    async def call(self, method: str, *params: Any) -> Any:
        """
        Issue a JSON-RPC call and return its ``result``.

        Raises:
            ExplorerRpcError: The node answered with an ``error`` object.
        """
        payload = {
            "jsonrpc": "1.0",
            "id": next(self._ids),
            "method": method,
            "params": list(params),
        }
        response = await self._client.post(self.url, json=payload)
        # bitcoind answers RPC errors with HTTP 500 and a JSON body
        if response.status_code >= 400 and not response.content:
            response.raise_for_status()
        body = response.json()
        error = body.get("error")
        if error:
            raise ExplorerRpcError(method, error.get("code"), error.get("message", ""))
        return body.get("result")

    async def send_to_address(self, address: str, amount: Decimal) -> str:
        """Send ``amount`` coins to ``address``. Returns the transaction id."""
        txid = await self.call("sendtoaddress", address, format(amount, "f"))
        logger.debug(f"Sent {amount} to {address}: {txid}")
        return txid

    async def generate(self, blocks: int = 1) -> List[str]:
        """Mine ``blocks`` blocks to a fresh node address."""
        address = await self.call("getnewaddress")
        return await self.call("generatetoaddress", blocks, address)

    async def aclose(self) -> None:
        await self._client.aclose()


def create_default_client() -> ExplorerNodeClient:
    """Build a client from settings."""
    return ExplorerNodeClient(
        url=settings.BTC_RPC_URL,
        user=settings.BTC_RPC_USER,
        password=settings.BTC_RPC_PASSWORD,
    )
