"""
End-to-End Tests for paytester.

These tests run against real infrastructure:
- A running payment server (SERVER_URL, or launched via SERVER_COMMAND)
- A regtest node reachable over JSON-RPC
- Real browser automation (Playwright)

Run with: E2E_TEST=1 pytest tests/e2e/ -v
"""
