"""
Two-factor code providers.

The login flow needs a human (or an out-of-band channel) to supply the code
sent by email or SMS. A TwoFactorCodeProvider decouples how that code is
obtained from the auth state machine.
"""

import asyncio
from typing import Protocol, runtime_checkable

import structlog

logger = structlog.get_logger(__name__)


@runtime_checkable
class TwoFactorCodeProvider(Protocol):
    """Supplies two-factor codes to ``AuthService.login``."""

    async def should_challenge(self) -> bool:
        """Whether the service should be asked to send a new code first."""
        ...

    async def get_code(self) -> str | None:
        """Return the code, or None if none is available yet."""
        ...

    async def set_status(self, success: bool) -> None:
        """Report whether the last code was accepted."""
        ...


class ConsoleCodeProvider:
    """Prompt for the code on the terminal."""

    def __init__(self, prompt: str = "Code: ") -> None:
        self._prompt = prompt

    async def should_challenge(self) -> bool:
        return True

    async def get_code(self) -> str | None:
        code = await asyncio.to_thread(input, self._prompt)
        return code.strip() or None

    async def set_status(self, success: bool) -> None:
        if not success:
            logger.warning("Two-factor code rejected")


class StaticCodeProvider:
    """
    Pre-supplied code, for scripts and tests.

    Attributes:
        last_status: Result reported by the last ``set_status`` call.
    """

    def __init__(self, code: str | None, *, challenge: bool = True) -> None:
        self._code = code
        self._challenge = challenge
        self.last_status: bool | None = None

    async def should_challenge(self) -> bool:
        return self._challenge

    async def get_code(self) -> str | None:
        return self._code

    async def set_status(self, success: bool) -> None:
        self.last_status = success
        logger.debug("Two-factor status reported", success=success)
