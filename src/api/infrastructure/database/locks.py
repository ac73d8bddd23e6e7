"""PostgreSQL advisory lock helpers."""

from __future__ import annotations

import hashlib
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection


def compute_stable_hash(key: str) -> int:
    """Compute a stable hash for advisory lock keys.

    Uses SHA-256 to ensure consistent hashing across Python versions and processes.
    Returns a value that fits within PostgreSQL's signed 64-bit bigint range.

    Args:
        key: The string to hash (e.g. "tenant-database:pillar_acme")

    Returns:
        A stable integer hash suitable for pg_advisory_lock
    """
    hash_hex = hashlib.sha256(key.encode()).hexdigest()[:16]
    return int(hash_hex, 16) & 0x7FFFFFFFFFFFFFFF


@asynccontextmanager
async def advisory_lock(connection: AsyncConnection, key: str) -> AsyncIterator[int]:
    """Hold a session-level advisory lock for the duration of the block.

    Session-level locks survive AUTOCOMMIT statements, unlike
    ``pg_advisory_xact_lock`` which would be released after each one.

    Yields:
        The numeric lock key
    """
    lock_key = compute_stable_hash(key)
    await connection.execute(text("SELECT pg_advisory_lock(:key)"), {"key": lock_key})
    try:
        yield lock_key
    finally:
        await connection.execute(
            text("SELECT pg_advisory_unlock(:key)"), {"key": lock_key}
        )
