"""
UI Navigation Models

Enumerations for the application's navigation sub-pages, status banners and
form options. Enum values are the literal element ids / option values the
application renders, so they double as the UI contract the harness relies on.
"""

from enum import Enum


class StoreNavPages(str, Enum):
    """Store settings sub-pages (element id of each side-menu entry)."""

    INDEX = "Index"
    RATES = "Rates"
    CHECKOUT = "Checkout"
    TOKENS = "Tokens"
    USERS = "Users"
    PAY_BUTTON = "PayButton"
    INTEGRATIONS = "Integrations"
    WEBHOOKS = "Webhooks"


class WalletsNavPages(str, Enum):
    """Wallet sub-pages. Transactions is the landing view of a wallet."""

    SEND = "Send"
    TRANSACTIONS = "Transactions"
    RECEIVE = "Receive"
    RESCAN = "Rescan"
    PSBT = "PSBT"
    SETTINGS = "Settings"


class ManageNavPages(str, Enum):
    """User profile sub-pages."""

    INDEX = "Index"
    CHANGE_PASSWORD = "ChangePassword"
    TWO_FACTOR_AUTHENTICATION = "TwoFactorAuthentication"
    API_KEYS = "APIKeys"
    NOTIFICATIONS = "Notifications"


class ServerNavPages(str, Enum):
    """Server admin sub-pages (rendered with a ``Server-`` id prefix)."""

    INDEX = "Index"
    USERS = "Users"
    EMAILS = "Emails"
    POLICIES = "Policies"
    THEME = "Theme"
    SERVICES = "Services"
    MAINTENANCE = "Maintenance"
    LOGS = "Logs"
    FILES = "Files"


class StatusSeverity(str, Enum):
    """Status banner severities."""

    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"

    @property
    def css_token(self) -> str:
        """Suffix of the ``alert-*`` class the banner is rendered with."""
        if self is StatusSeverity.ERROR:
            return "danger"
        return self.value


class ScriptPubKeyType(str, Enum):
    """Address formats offered when generating a wallet."""

    LEGACY = "Legacy"
    SEGWIT = "Segwit"
    SEGWIT_P2SH = "SegwitP2SH"
    TAPROOT_BIP86 = "TaprootBIP86"


class LightningConnectionType(str, Enum):
    """Kinds of external lightning node a store can be connected to."""

    CHARGE = "charge"
    CLIGHTNING = "clightning"
    LND_REST = "lnd-rest"
    LND_GRPC = "lnd-grpc"
    ECLAIR = "eclair"
