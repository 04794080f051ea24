#!/usr/bin/env python3
"""Click through every side menu of the payment server UI against a live instance."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from paytester.config import settings
from paytester.core.browser_tester import BrowserTester
from paytester.logs import configure_logging
from paytester.models.navigation import StoreNavPages

logger = logging.getLogger("paytester.smoke")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Register an admin, create a store and visit every side menu page."
    )
    parser.add_argument(
        "--scope",
        default="smoke",
        help="Scope name for the server data directory.",
    )
    parser.add_argument(
        "--new-db",
        action="store_true",
        help="Start from an empty server data directory.",
    )
    parser.add_argument(
        "--server-url",
        default=None,
        help="Override SERVER_URL.",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window.",
    )
    parser.add_argument(
        "--with-wallet",
        action="store_true",
        help="Also generate a BTC hot wallet and visit the wallet pages.",
    )
    return parser


async def _run(args: argparse.Namespace) -> None:
    tester = BrowserTester.create(args.scope, new_db=args.new_db)
    async with tester as s:
        email = await s.register_new_user(is_admin=True)
        logger.info(f"[smoke] registered admin {email}")

        await s.go_to_server()
        await s.click_on_all_side_menus()

        store_name, store_id = await s.create_new_store()
        logger.info(f"[smoke] created store {store_name} ({store_id})")
        await s.go_to_store(store_id, StoreNavPages.INDEX)
        await s.click_on_all_side_menus()

        await s.go_to_profile()
        await s.click_on_all_side_menus()

        if args.with_wallet:
            await s.go_to_store()
            mnemonic = await s.generate_wallet("BTC")
            logger.info(f"[smoke] generated wallet {s.wallet_id} ({len(mnemonic.words)} words)")
            await s.go_to_wallet()
            await s.click_on_all_side_menus()


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()

    if args.server_url:
        settings.SERVER_URL = args.server_url
    if args.headed:
        settings.TESTS_HEADLESS = False

    configure_logging()
    try:
        asyncio.run(_run(args))
    except AssertionError as exc:
        print(f"[smoke] failed: {exc}", file=sys.stderr)
        return 1
    print("[smoke] all pages rendered without errors")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
