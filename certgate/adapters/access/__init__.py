"""Access control adapters - Role checks and authentication."""

from .static import StaticAccessControl

__all__ = ["StaticAccessControl"]
