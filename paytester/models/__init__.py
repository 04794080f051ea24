"""
Data models for the payment-server browser harness.

This package contains:
- Navigation page enums and form options (store, wallet, profile, server)
- Wallet identity and recovery phrase models
"""

from paytester.models.navigation import (
    StoreNavPages,
    WalletsNavPages,
    ManageNavPages,
    ServerNavPages,
    StatusSeverity,
    ScriptPubKeyType,
    LightningConnectionType,
)

from paytester.models.wallet import (
    WalletId,
    Mnemonic,
)

__all__ = [
    # navigation
    "StoreNavPages",
    "WalletsNavPages",
    "ManageNavPages",
    "ServerNavPages",
    "StatusSeverity",
    "ScriptPubKeyType",
    "LightningConnectionType",
    # wallet
    "WalletId",
    "Mnemonic",
]
