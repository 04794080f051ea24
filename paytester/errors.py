"""
Exceptions raised by the harness.

Element lookups that exceed the implicit wait surface as Playwright's own
``TimeoutError`` and are not wrapped here.
"""

from __future__ import annotations


class PayTesterError(Exception):
    """Base class for harness errors."""


class HarnessAssertionError(PayTesterError, AssertionError):
    """A page did not reach the expected state (error page, missing banner...)."""


class UnsupportedConnectionType(PayTesterError, ValueError):
    """A lightning connection kind has no connection-string builder."""

    def __init__(self, connection_type: object):
        self.connection_type = connection_type
        super().__init__(f"Unsupported lightning connection type: {connection_type}")


class CheckboxNotResponding(PayTesterError):
    """A checkbox kept its state after the retry ceiling."""

    def __init__(self, description: str, desired: bool, attempts: int):
        self.desired = desired
        self.attempts = attempts
        super().__init__(
            f"Checkbox {description} did not become "
            f"{'checked' if desired else 'unchecked'} after {attempts} clicks"
        )


class ServerStartupError(PayTesterError, RuntimeError):
    """The server-under-test never became ready."""

    def __init__(self, message: str, stdout: str = "", stderr: str = ""):
        self.stdout = stdout
        self.stderr = stderr
        details = message
        if stdout:
            details += f"\nstdout: {stdout}"
        if stderr:
            details += f"\nstderr: {stderr}"
        super().__init__(details)


class ExplorerRpcError(PayTesterError):
    """The blockchain node answered a JSON-RPC call with an error."""

    def __init__(self, method: str, code: int | None, message: str):
        self.method = method
        self.code = code
        super().__init__(f"RPC {method} failed ({code}): {message}")


class InvalidAddressError(PayTesterError, ValueError):
    """An address is not valid for the network it was parsed against."""
