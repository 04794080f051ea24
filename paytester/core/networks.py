"""
Network descriptors for the assets the server-under-test is configured with.

Only enough of each network is modelled to sanity-check receive addresses read
back from the UI before coins are sent to them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from paytester.errors import InvalidAddressError

_BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_BASE58_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{25,35}$")


@dataclass(frozen=True, slots=True)
class Network:
    crypto_code: str
    chain: str
    bech32_hrp: str
    base58_prefixes: tuple[str, ...]

    def parse_address(self, address: str) -> str:
        """
        Validate ``address`` for this network and return it stripped.

        Raises:
            InvalidAddressError: address belongs to another network or is malformed.
        """
        candidate = address.strip()
        if self._is_bech32(candidate) or self._is_base58(candidate):
            return candidate
        raise InvalidAddressError(
            f"{address!r} is not a valid {self.crypto_code} {self.chain} address"
        )

    def _is_bech32(self, address: str) -> bool:
        lowered = address.lower()
        if address != lowered and address != address.upper():
            return False
        prefix = f"{self.bech32_hrp}1"
        if not lowered.startswith(prefix):
            return False
        data = lowered[len(prefix):]
        return len(data) >= 6 and all(c in _BECH32_CHARSET for c in data)

    def _is_base58(self, address: str) -> bool:
        return bool(_BASE58_RE.match(address)) and address.startswith(
            self.base58_prefixes
        )


_NETWORKS: dict[tuple[str, str], Network] = {
    ("BTC", "mainnet"): Network("BTC", "mainnet", "bc", ("1", "3")),
    ("BTC", "testnet"): Network("BTC", "testnet", "tb", ("m", "n", "2")),
    ("BTC", "regtest"): Network("BTC", "regtest", "bcrt", ("m", "n", "2")),
    ("LTC", "mainnet"): Network("LTC", "mainnet", "ltc", ("L", "M", "3")),
    ("LTC", "testnet"): Network("LTC", "testnet", "tltc", ("m", "n", "Q", "2")),
    ("LTC", "regtest"): Network("LTC", "regtest", "rltc", ("m", "n", "Q", "2")),
}


class NetworkProvider:
    """Resolves networks by asset code for a single chain type."""

    def __init__(self, chain: str):
        self.chain = chain

    def get_network(self, crypto_code: str) -> Network:
        try:
            return _NETWORKS[(crypto_code.upper(), self.chain)]
        except KeyError:
            raise KeyError(
                f"No network configured for {crypto_code} on {self.chain}"
            ) from None

    @property
    def crypto_codes(self) -> list[str]:
        return sorted(code for code, chain in _NETWORKS if chain == self.chain)
