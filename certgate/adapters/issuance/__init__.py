"""Issuance adapters - Certificate ledger implementations."""

from .console import ConsoleCertificateIssuer

__all__ = ["ConsoleCertificateIssuer"]
