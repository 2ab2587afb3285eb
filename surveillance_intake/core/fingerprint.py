"""
Content fingerprinting for duplicate detection.

A fingerprint is the SHA-256 digest of a table's canonical serialization:
the header line followed by one line per row, cells joined by commas and
lines joined by newlines. Only used for equality, never reversed.
"""

import hashlib

from surveillance_intake.core.models import CanonicalTable


def serialize_table(table: CanonicalTable) -> str:
    """Canonical text form hashed by fingerprint()."""
    lines = [",".join(table.headers)]
    lines.extend(",".join(row) for row in table.rows)
    return "\n".join(lines)


def fingerprint(table: CanonicalTable) -> str:
    """
    Compute the content fingerprint of a canonical table.

    Args:
        table: Normalized table

    Returns:
        64-character lowercase hex SHA-256 digest
    """
    return hashlib.sha256(serialize_table(table).encode("utf-8")).hexdigest()
