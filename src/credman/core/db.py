# Core Module - Central SQLCipher Connection Helper
#
# Every credman database connection goes through `connect()` from this
# module instead of raw `sqlcipher.connect()`. This ensures:
#
#   - PRAGMA key is the first statement issued on the connection
#   - busy_timeout to avoid SQLITE_BUSY under contention
#   - foreign_keys enforcement on every connection
#
# The store stays in rollback-journal mode: WAL would leave -wal/-shm side
# files next to what must be a single encrypted file.

from pathlib import Path
from typing import Union

from sqlcipher3 import dbapi2 as sqlcipher


def escape_pragma_value(value: str) -> str:
    """
    Escape single quotes for SQLCipher PRAGMA statements.

    PRAGMA key/rekey do not accept bound parameters, so the passphrase is
    inlined as a string literal with quotes doubled.
    """
    return value.replace("'", "''")


def apply_key(conn: sqlcipher.Connection, passphrase: str, *, rekey: bool = False) -> None:
    """Issue PRAGMA key (or PRAGMA rekey) for ``passphrase`` on ``conn``."""
    pragma = "rekey" if rekey else "key"
    conn.execute(f"PRAGMA {pragma} = '{escape_pragma_value(passphrase)}'")


def connect(db_path: Union[str, Path], passphrase: str) -> sqlcipher.Connection:
    """Open a SQLCipher connection keyed with ``passphrase``.

    The key is applied but not verified; SQLCipher only notices a wrong key
    on the first read. Callers verify with a trivial query.

    Args:
        db_path: Path to the database file.
        passphrase: Master password used to derive the page key.

    Returns:
        sqlcipher Connection with the key applied. Call configure() after
        verification for busy_timeout and foreign_keys.
    """
    conn = sqlcipher.connect(str(db_path))
    apply_key(conn, passphrase)
    return conn


def configure(conn: sqlcipher.Connection) -> None:
    """Apply per-connection PRAGMAs once the key has been verified."""
    conn.execute("PRAGMA busy_timeout=5000")
    conn.execute("PRAGMA foreign_keys=ON")
