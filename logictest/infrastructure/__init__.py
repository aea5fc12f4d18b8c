"""
Infrastructure package for logictest.

Centralizes database connectivity concerns for the server-backed harnesses.
Keep this layer focused on I/O and resource management, decoupled from
parsing and verification logic.
"""

from logictest.infrastructure.db_factory import (
    apply_statement_timeout,
    build_dsn,
    get_sync_connection,
)

__all__ = [
    "apply_statement_timeout",
    "build_dsn",
    "get_sync_connection",
]
