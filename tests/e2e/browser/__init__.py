"""
Browser E2E Tests using Playwright.

These tests drive the payment server UI end to end:
- Registration and login
- Store and wallet setup
- Invoice creation and side-menu navigation

Run with: E2E_TEST=1 pytest tests/e2e/browser/ -v
"""
