"""Repository adapters - Request store implementations."""

from .memory import InMemoryRequestStore
from .postgres import PostgresRequestStore, run_migrations

__all__ = ["InMemoryRequestStore", "PostgresRequestStore", "run_migrations"]
