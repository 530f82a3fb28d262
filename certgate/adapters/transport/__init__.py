"""Transport adapters - Verification system implementations."""

from .console import ConsoleVerificationTransport

__all__ = ["ConsoleVerificationTransport"]
