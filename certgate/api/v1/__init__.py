"""
API v1 package.

Contains versioned API routes for the certificate issuance API.
"""

from certgate.api.v1.routes import router

__all__ = ["router"]
