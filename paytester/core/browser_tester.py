"""
Browser Test Harness

Drives the payment server's web UI through a Playwright-controlled browser.
A ``BrowserTester`` owns one browser session and one server-under-test and
offers helpers for each UI flow step (registration, stores, wallets, invoices,
payments) plus assertions for error pages and status banners.

Usage:
    async with BrowserTester.create() as s:
        await s.register_new_user(is_admin=True)
        store_name, store_id = await s.create_new_store()
        await s.generate_wallet("BTC")
        invoice_id = await s.create_invoice(store_name)

Every browser action is awaited before the next one is issued; element
lookups wait up to ``IMPLICIT_WAIT_SECONDS`` before failing with Playwright's
``TimeoutError``.
"""

from __future__ import annotations

import inspect
import logging
import secrets
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Tuple, Union
from urllib.parse import parse_qs, urljoin, urlsplit

from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from paytester.config import settings
from paytester.core.lightning import build_connection_string
from paytester.core.page_inspection import JsErrorCollector, assert_no_error
from paytester.core.server_tester import ServerTester
from paytester.errors import CheckboxNotResponding, HarnessAssertionError
from paytester.models.navigation import (
    LightningConnectionType,
    ManageNavPages,
    ScriptPubKeyType,
    ServerNavPages,
    StatusSeverity,
    StoreNavPages,
    WalletsNavPages,
)
from paytester.models.wallet import Mnemonic, WalletId

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Locator, Page, Playwright

logger = logging.getLogger(__name__)

IMPLICIT_WAIT_SECONDS = 5
DEFAULT_PASSWORD = "123456"
DEFAULT_DERIVATION_SCHEME = (
    "xpub661MyMwAqRbcGABgHMUXDzPzH1tU7eZaAaJQXhDXsSxsqyQzQeU6kznNfSuAyqAK9Ua"
    "WSaZaMFdNiY5BCF4zBPAzSnwfUAwUhwttuAKwfRX-[legacy]"
)
PAYJOIN_ENDPOINT_KEY = "pj"
NOT_FOUND_MARKER = "404 - Page not found</h1>"
CHECKBOX_MAX_ATTEMPTS = 3


def parse_invoice_id(banner_text: str) -> str:
    """
    Extract the invoice id from a creation banner such as
    ``"Invoice 7hGQ2ex8vcgLt2Bj5qGkTq created!"``.

    The id is the second space-separated token; this ties the harness to the
    banner's wording. Only spaces separate tokens, so a dismiss glyph on its
    own line (``"×\\nInvoice <id> created!"``) stays glued to the first token.
    """
    tokens = [t for t in banner_text.strip().split(" ") if t]
    if len(tokens) < 2:
        raise HarnessAssertionError(
            f"Cannot read an invoice id from banner text {banner_text!r}"
        )
    return tokens[1]


class BrowserTester:
    """
    Browser session + server-under-test pair driving the application UI.

    ``store_id`` and ``wallet_id`` hold the most recently created store and
    wallet; store- and wallet-scoped helpers fall back to them when no
    explicit id is passed.
    """

    def __init__(self, server: ServerTester):
        self.server = server
        self.store_id: Optional[str] = None
        self.wallet_id: Optional[WalletId] = None

        self.js_errors = JsErrorCollector()
        self._playwright: Optional["Playwright"] = None
        self.browser: Optional["Browser"] = None
        self.context: Optional["BrowserContext"] = None
        self._page: Optional["Page"] = None

    @classmethod
    def create(cls, scope: Optional[str] = None, new_db: bool = False) -> "BrowserTester":
        """
        Build a harness for ``scope`` (defaults to the calling function's name).
        """
        if scope is None:
            caller = inspect.currentframe().f_back
            scope = caller.f_code.co_name if caller is not None else "paytester"
        return cls(ServerTester.create(scope, new_db))

    async def __aenter__(self) -> "BrowserTester":
        try:
            await self.start()
        except BaseException:
            await self.dispose()
            raise
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.dispose()

    @property
    def page(self) -> "Page":
        if self._page is None:
            raise RuntimeError("Browser session not started; call start() first")
        return self._page

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> None:
        """Start the server-under-test, launch the browser, open the register page."""
        await self.server.start()

        width, height = settings.TESTS_WINDOW_WIDTH, settings.TESTS_WINDOW_HEIGHT
        self._playwright = await async_playwright().start()
        self.browser = await self._launch_browser(width, height)
        self.context = await self.browser.new_context(
            viewport={"width": width, "height": height}
        )
        self._page = await self.context.new_page()
        self._page.set_default_timeout(IMPLICIT_WAIT_SECONDS * 1000)
        self.js_errors.attach(self._page)

        logger.info(
            f"Browser: Using {self.browser.browser_type.name} {self.browser.version}"
        )
        logger.info(f"Browser: Browsing to {self.server.server_uri}")
        logger.info(f"Browser: Resolution {self._page.viewport_size}")

        await self.go_to_register()
        await self.assert_no_error()

    async def _launch_browser(self, width: int, height: int) -> "Browser":
        headless = settings.TESTS_HEADLESS
        if settings.TESTS_BROWSER == "firefox":
            return await self._playwright.firefox.launch(
                headless=headless,
                args=[f"--width={width}", f"--height={height}"],
            )

        args = []
        if self.server.in_container:
            # Chrome crashes on startup in containers unless this comes first
            args.append("--no-sandbox")
        args.append(f"--window-size={width},{height}")
        args.append("--disable-dev-shm-usage")
        return await self._playwright.chromium.launch(headless=headless, args=args)

    async def dispose(self) -> None:
        """
        Close the browser and release the server-under-test.

        A failing browser close is logged and ignored; the server is disposed
        regardless of what happens to the browser.
        """
        try:
            if self.browser is not None:
                try:
                    await self.browser.close()
                except Exception as e:
                    logger.warning(f"Browser close failed (ignored): {e}")
            if self._playwright is not None:
                await self._playwright.stop()
        finally:
            self._page = None
            self.context = None
            self.browser = None
            self._playwright = None
            if self.server is not None:
                await self.server.dispose()

    # =========================================================================
    # ELEMENT HELPERS
    # =========================================================================

    def by_id(self, element_id: str) -> "Locator":
        return self.page.locator(f"id={element_id}")

    def by_name(self, name: str) -> "Locator":
        return self.page.locator(f"[name='{name}']")

    async def _find_all(self, selector: str) -> "Locator":
        """Locator for ``selector``, waiting for at least one match within the implicit wait."""
        locator = self.page.locator(selector)
        try:
            await locator.first.wait_for(state="attached")
        except PlaywrightTimeoutError:
            pass
        return locator

    def link(self, relative_link: str) -> str:
        base = self.server.server_uri.rstrip("/")
        return base + "/" + relative_link.lstrip("/")

    # =========================================================================
    # NAVIGATION
    # =========================================================================

    async def go_to_register(self) -> None:
        await self.page.goto(self.link("/Account/Register"))

    async def go_to_login(self) -> None:
        await self.page.goto(urljoin(self.server.server_uri, "Account/Login"))

    async def go_to_home(self) -> None:
        await self.page.goto(self.server.server_uri)

    async def go_to_url(self, relative_url: str) -> None:
        await self.page.goto(urljoin(self.server.server_uri, relative_url))

    async def logout(self) -> None:
        await self.by_id("Logout").click()

    async def login(self, user: str, password: str) -> None:
        await self.by_id("Email").fill(user)
        await self.by_id("Password").fill(password)
        await self.by_id("LoginButton").click()

    async def go_to_stores(self) -> None:
        await self.by_id("Stores").click()

    async def go_to_store(
        self,
        store_id: Optional[str] = None,
        nav_page: StoreNavPages = StoreNavPages.INDEX,
    ) -> None:
        """Open a store's settings; defaults to the store created last."""
        store_id = store_id or self.store_id
        if not store_id:
            raise ValueError("No store id given and no store has been created")

        await self.by_id("Stores").click()
        await self.by_id(f"update-store-{store_id}").click()
        if nav_page != StoreNavPages.INDEX:
            await self.by_id(StoreNavPages(nav_page).value).click()

    async def go_to_server(self, nav_page: ServerNavPages = ServerNavPages.INDEX) -> None:
        await self.by_id("ServerSettings").click()
        if nav_page != ServerNavPages.INDEX:
            await self.by_id(f"Server-{ServerNavPages(nav_page).value}").click()

    async def go_to_profile(self, nav_page: ManageNavPages = ManageNavPages.INDEX) -> None:
        await self.by_id("MySettings").click()
        if nav_page != ManageNavPages.INDEX:
            await self.by_id(ManageNavPages(nav_page).value).click()

    async def go_to_invoices(self) -> None:
        await self.by_id("Invoices").click()

    async def go_to_invoice_checkout(self, invoice_id: str) -> None:
        self.js_errors.clear()
        await self.by_id("Invoices").click()
        await self.by_id(f"invoice-checkout-{invoice_id}").click()
        self.check_for_js_errors()

    async def go_to_invoice(self, invoice_id: str) -> None:
        """Open the details page of ``invoice_id`` from the invoice list."""
        await self.go_to_invoices()
        links = await self._find_all(".invoice-details-link")
        needle = invoice_id.lower()
        for i in range(await links.count()):
            link = links.nth(i)
            href = await link.get_attribute("href") or ""
            if needle in href.lower():
                await link.click()
                return
        logger.warning(f"No invoice details link found for {invoice_id}")

    async def go_to_wallet(
        self,
        wallet_id: Optional[WalletId] = None,
        nav_page: WalletsNavPages = WalletsNavPages.SEND,
    ) -> None:
        """Open a wallet; the transactions list is its landing view."""
        wallet_id = wallet_id or self.wallet_id
        if wallet_id is None:
            raise ValueError("No wallet id given and no wallet has been generated")

        await self.page.goto(urljoin(self.server.server_uri, f"wallets/{wallet_id}"))
        if nav_page != WalletsNavPages.TRANSACTIONS:
            await self.by_id(f"Wallet{WalletsNavPages(nav_page).value}").click()

    async def click_on_all_side_menus(self) -> None:
        """Visit every side-menu link of the current section, checking each page."""
        links = await (await self._find_all(".nav-pills .nav-link")).evaluate_all(
            "elements => elements.map(e => e.href)"
        )
        await self.assert_no_error()
        if not links:
            raise HarnessAssertionError(f"No side menu links on {self.page.url}")
        for link in links:
            logger.info(f"Checking no error on {link}")
            await self.page.goto(link)
            await self.assert_no_error()

    # =========================================================================
    # FLOWS
    # =========================================================================

    async def register_new_user(self, is_admin: bool = False) -> str:
        """Register a random user with ``DEFAULT_PASSWORD``. Returns the email."""
        usr = secrets.token_hex(32)[-20:] + "@a.com"
        logger.info(f"User: {usr} with password {DEFAULT_PASSWORD}")
        await self.by_id("Email").fill(usr)
        await self.by_id("Password").fill(DEFAULT_PASSWORD)
        await self.by_id("ConfirmPassword").fill(DEFAULT_PASSWORD)
        if is_admin:
            await self.by_id("IsAdmin").click()
        await self.by_id("RegisterButton").click()
        await self.assert_no_error()
        return usr

    async def create_new_store(self) -> Tuple[str, str]:
        """Create a randomly named store and make it the active store."""
        await self.by_id("Stores").click()
        await self.by_id("CreateStore").click()
        name = f"Store{secrets.randbits(64)}"
        await self.by_id("Name").fill(name)
        await self.by_id("Create").click()
        self.store_id = await self.by_id("Id").input_value()
        return name, self.store_id

    async def generate_wallet(
        self,
        crypto_code: str = "BTC",
        seed: str = "",
        import_keys: bool = False,
        private_keys: bool = False,
        script_pubkey_type: ScriptPubKeyType = ScriptPubKeyType.SEGWIT,
    ) -> Mnemonic:
        """
        Generate a hot wallet for the active store.

        Without a ``seed`` the application generates one and the phrase shown
        on the backup page is returned.
        """
        if not self.store_id:
            raise ValueError("generate_wallet needs an active store; call create_new_store()")

        await self.by_id(f"Modify{crypto_code}").click()
        await self.by_id("import-from-btn").click()
        await self.by_id("nbxplorergeneratewalletbtn").click()
        await self.by_id("ExistingMnemonic").fill(seed)
        await self.set_checkbox(self.by_id("SavePrivateKeys"), private_keys)
        await self.set_checkbox(self.by_id("ImportKeysToRPC"), import_keys)
        await self.by_id("ScriptPubKeyType").select_option(
            value=ScriptPubKeyType(script_pubkey_type).value
        )
        logger.info("Trying to click btn-generate")
        await self.by_id("btn-generate").click()

        # Seed backup page
        await self.find_alert_message()
        if not seed:
            seed = await self.by_id("recovery-phrase").first.get_attribute("data-mnemonic")
            if not seed:
                raise HarnessAssertionError("Recovery phrase not displayed after generation")

        # Confirm seed backup
        await self.by_id("confirm").click()
        await self.by_id("submit").click()

        self.wallet_id = WalletId(store_id=self.store_id, crypto_code=crypto_code)
        return Mnemonic.from_phrase(seed)

    async def add_derivation_scheme(
        self,
        crypto_code: str = "BTC",
        derivation_scheme: str = DEFAULT_DERIVATION_SCHEME,
    ) -> None:
        """Import a watch-only wallet from an extended public key."""
        await self.by_id(f"Modify{crypto_code}").click()
        await self.page.locator(".store-derivation-scheme").first.fill(derivation_scheme)
        await self.by_id("Continue").click()
        await self.by_id("Confirm").click()
        await self.find_alert_message()
        await self.assert_no_error()

    async def add_lightning_node(
        self,
        crypto_code: str,
        connection_type: Union[LightningConnectionType, str],
    ) -> None:
        """
        Connect the active store to one of the merchant lightning nodes.

        Raises:
            UnsupportedConnectionType: before touching the page, for node kinds
                that are not started alongside the server.
        """
        connection_string = build_connection_string(connection_type, self.server.lightning)

        await self.by_id(f"Modify-Lightning{crypto_code}").click()
        await self.by_name("ConnectionString").fill(connection_string)
        await self.by_id("save").click()

    async def add_internal_lightning_node(self, crypto_code: str) -> None:
        await self.by_id(f"Modify-Lightning{crypto_code}").click()
        await self.by_id("internal-ln-node-setter").click()
        await self.by_id("save").click()

    async def create_invoice(
        self,
        store_name: str,
        amount: Union[Decimal, int, float] = 100,
        currency: str = "USD",
        refund_email: str = "",
    ) -> str:
        """Create an invoice through the UI and return its id."""
        await self.go_to_invoices()
        await self.by_id("CreateNewInvoice").click()
        await self.by_id("Amount").fill(str(amount))
        await self.by_id("Currency").fill(currency)
        await self.by_id("BuyerEmail").fill(refund_email)
        await self.by_name("StoreId").select_option(label=store_name)
        await self.by_id("Create").click()

        banner = await self.find_alert_message()
        return parse_invoice_id(await banner.inner_text())

    async def fund_store_wallet(
        self,
        wallet_id: Optional[WalletId] = None,
        coins: int = 1,
        denomination: Union[Decimal, int, str] = Decimal(1),
    ) -> None:
        """
        Send ``coins`` outputs of ``denomination`` to a fresh receive address
        of the wallet, one request at a time.
        """
        wallet_id = wallet_id or self.wallet_id
        if wallet_id is None:
            raise ValueError("No wallet id given and no wallet has been generated")

        await self.go_to_wallet(wallet_id, WalletsNavPages.RECEIVE)
        await self.by_id("generateButton").click()
        address_str = await self.by_id("address").input_value()
        network = self.server.network_provider.get_network(wallet_id.crypto_code)
        address = network.parse_address(address_str)

        amount = Decimal(denomination)
        for i in range(coins):
            await self.server.explorer_node.send_to_address(address, amount)
            logger.debug(f"Funded {wallet_id} coin {i + 1}/{coins} ({amount})")

    async def pay_invoice(self, wallet_id: WalletId, invoice_id: str) -> None:
        """Pay ``invoice_id`` from ``wallet_id`` using its payjoin-enabled BIP21 URI."""
        await self.go_to_invoice_checkout(invoice_id)
        bip21 = await self.page.locator(
            ".payment__details__instruction__open-wallet__btn"
        ).first.get_attribute("href")
        if not bip21 or PAYJOIN_ENDPOINT_KEY not in parse_qs(urlsplit(bip21).query):
            raise HarnessAssertionError(
                f"Payment URI is not payjoin enabled ({PAYJOIN_ENDPOINT_KEY}): {bip21!r}"
            )

        await self.go_to_wallet(wallet_id)

        async def _paste_bip21(dialog) -> None:
            await dialog.accept(bip21)

        self.page.once("dialog", _paste_bip21)
        await self.by_id("bip21parse").click()
        await self.by_id("SendMenu").click()
        await self.page.locator("button[value=nbx-seed]").first.click()
        await self.page.locator("button[value=broadcast]").first.click()

    # =========================================================================
    # ASSERTIONS
    # =========================================================================

    async def assert_no_error(self) -> None:
        await assert_no_error(self.page)

    async def assert_not_found(self) -> None:
        if NOT_FOUND_MARKER not in await self.page.content():
            raise HarnessAssertionError(f"Expected a 404 page at {self.page.url}")

    async def find_alert_message(
        self, severity: StatusSeverity = StatusSeverity.SUCCESS
    ) -> "Locator":
        """Locator of the status banner of ``severity``; fails if none shows up."""
        banner = self.page.locator(f".alert-{StatusSeverity(severity).css_token}").first
        await banner.wait_for(state="attached")
        return banner

    def check_for_js_errors(self) -> None:
        self.js_errors.assert_no_js_errors()

    async def set_checkbox(self, element: "Locator", value: bool) -> None:
        """
        Bring a checkbox to ``value``, re-clicking when a click is not registered.

        Raises:
            CheckboxNotResponding: still in the wrong state after
                ``CHECKBOX_MAX_ATTEMPTS`` attempts.
        """
        for attempt in range(1, CHECKBOX_MAX_ATTEMPTS + 1):
            if await element.is_checked() != value:
                await element.click()
            if await element.is_checked() == value:
                return
            logger.info(f"SetCheckbox attempt {attempt} not registered, trying to click again")
        raise CheckboxNotResponding(str(element), value, CHECKBOX_MAX_ATTEMPTS)

    async def set_checkbox_by_id(self, checkbox_id: str, value: bool) -> None:
        await self.set_checkbox(self.by_id(checkbox_id), value)
