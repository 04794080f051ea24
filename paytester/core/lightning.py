"""
Lightning node connection strings.

Each supported ``LightningConnectionType`` maps to a builder that renders the
connection string the store's lightning setup form accepts, using the endpoints
of the lightning nodes started alongside the server-under-test.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from paytester.config import settings
from paytester.errors import UnsupportedConnectionType
from paytester.models.navigation import LightningConnectionType


@dataclass(frozen=True, slots=True)
class LightningEndpoints:
    """Endpoints of the merchant-side lightning services."""

    charge_uri: str
    lightningd_address: str
    lnd_base_url: str

    @classmethod
    def from_settings(cls) -> "LightningEndpoints":
        return cls(
            charge_uri=settings.MERCHANT_CHARGE_URL,
            lightningd_address=settings.MERCHANT_LIGHTNINGD_URL,
            lnd_base_url=settings.MERCHANT_LND_URL,
        )


def _charge(endpoints: LightningEndpoints) -> str:
    return f"type=charge;server={endpoints.charge_uri};allowinsecure=true"


def _clightning(endpoints: LightningEndpoints) -> str:
    return f"type=clightning;server={endpoints.lightningd_address}"


def _lnd_rest(endpoints: LightningEndpoints) -> str:
    return f"type=lnd-rest;server={endpoints.lnd_base_url};allowinsecure=true"


_BUILDERS: dict[LightningConnectionType, Callable[[LightningEndpoints], str]] = {
    LightningConnectionType.CHARGE: _charge,
    LightningConnectionType.CLIGHTNING: _clightning,
    LightningConnectionType.LND_REST: _lnd_rest,
}

# No node of these kinds is started for the server-under-test.
_UNSUPPORTED = frozenset(
    {
        LightningConnectionType.LND_GRPC,
        LightningConnectionType.ECLAIR,
    }
)

_unhandled = set(LightningConnectionType) - set(_BUILDERS) - _UNSUPPORTED
if _unhandled:
    raise RuntimeError(f"Lightning connection types without a builder: {_unhandled}")


def supported_connection_types() -> list[LightningConnectionType]:
    return list(_BUILDERS)


def build_connection_string(
    connection_type: LightningConnectionType, endpoints: LightningEndpoints
) -> str:
    """
    Render the connection string for ``connection_type``.

    Raises:
        UnsupportedConnectionType: no node of that kind is available.
    """
    try:
        builder = _BUILDERS[LightningConnectionType(connection_type)]
    except (KeyError, ValueError):
        raise UnsupportedConnectionType(connection_type) from None
    return builder(endpoints)
