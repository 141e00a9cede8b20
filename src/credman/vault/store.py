# Vault - Encrypted Store
#
# One SQLCipher database file holding two secret tables (logins, API keys).
# The master password is the SQLCipher key: the whole file is encrypted and
# a wrong password surfaces as "file is not a database" on the first read.

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from sqlcipher3 import dbapi2 as sqlcipher

from ..core import EventSeverity, EventType, get_audit_logger
from ..core.db import apply_key, configure, connect
from .exceptions import (
    AlreadyExists,
    AuthenticationFailed,
    InvalidMasterPassword,
    StorageError,
    StoreNotFound,
)
from .models import SecretField, SecretKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableSpec:
    """Where one secret kind lives: table, key columns and field -> column."""
    table: str
    id_column: str
    name_column: str
    columns: Dict[SecretField, str]


# Table and column names match databases written by earlier cman releases.
TABLES: Dict[SecretKind, TableSpec] = {
    SecretKind.LOGIN: TableSpec(
        table="account",
        id_column="acc_id",
        name_column="acc_name",
        columns={
            SecretField.NAME: "acc_name",
            SecretField.USERNAME: "user_name",
            SecretField.PASSWORD: "password",
        },
    ),
    SecretKind.API: TableSpec(
        table="api_keys",
        id_column="api_id",
        name_column="api_name",
        columns={
            SecretField.NAME: "api_name",
            SecretField.USERNAME: "user_name",
            SecretField.DESCRIPTION: "description",
            SecretField.KEY: "api_key",
        },
    ),
}

SCHEMA = """
BEGIN;
CREATE TABLE account (
    acc_id INTEGER PRIMARY KEY AUTOINCREMENT,
    acc_name VARCHAR(100) NOT NULL UNIQUE,
    user_name VARCHAR(100),
    password VARCHAR(256)
);
CREATE TABLE api_keys (
    api_id INTEGER PRIMARY KEY AUTOINCREMENT,
    api_name VARCHAR(100) NOT NULL UNIQUE,
    description VARCHAR(256),
    user_name VARCHAR(100),
    api_key VARCHAR(256)
);
COMMIT;
"""


class EncryptedStore:
    """
    Handle to one encrypted credential database.

    Security:
    - Entire file encrypted by SQLCipher (AES-256, key derived from master password)
    - Master password verified by a trial read of sqlite_master
    - Master password never stored or logged
    - Rekey delegated to SQLCipher's PRAGMA rekey (crash-safe)

    Use as a context manager so the connection is closed on every exit path:

        with EncryptedStore.open(path, master_password) as store:
            RecordOperations(store).list_secrets(SecretKind.LOGIN)
    """

    def __init__(self, path: Path, conn: sqlcipher.Connection):
        self.path = Path(path)
        self._conn: Optional[sqlcipher.Connection] = conn
        self.audit = get_audit_logger()

    # ── Lifecycle ───────────────────────────────────────────────────

    @staticmethod
    def exists(path: Union[str, Path]) -> bool:
        """True if a store file is present at ``path`` (0-byte files don't count)."""
        path = Path(path)
        return path.is_file() and path.stat().st_size > 0

    @classmethod
    def create(cls, path: Union[str, Path], master_password: str) -> "EncryptedStore":
        """
        Create a new encrypted store with empty secret tables.

        Args:
            path: Where to create the database file
            master_password: Passphrase the file is encrypted with

        Returns:
            Open EncryptedStore for the new file

        Raises:
            AlreadyExists: A non-empty file is already present at ``path``
            InvalidMasterPassword: ``master_password`` is empty
            StorageError: The file or schema could not be written
        """
        path = Path(path)
        _require_password(master_password)

        if cls.exists(path) or path.is_dir():
            raise AlreadyExists(f"File already exists at path: {path}")
        # Stale 0-byte file from an interrupted create
        if path.exists():
            path.unlink()

        audit = get_audit_logger()
        conn = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            conn = connect(path, master_password)
            configure(conn)
            conn.executescript(SCHEMA)
        except (sqlcipher.Error, OSError) as e:
            if conn is not None:
                conn.close()
            path.unlink(missing_ok=True)
            audit.log_event(
                event_type=EventType.VAULT_ERROR,
                severity=EventSeverity.CRITICAL,
                message=f"Failed to create database: {e}",
                details={"path": str(path)},
            )
            raise StorageError(f"Failed to create database at {path}: {e}") from e

        audit.log_vault_event(
            EventType.VAULT_CREATED,
            "Database created with master password",
            details={"path": str(path)},
        )
        logger.debug("Created credential store at %s", path)
        return cls(path, conn)

    @classmethod
    def open(cls, path: Union[str, Path], master_password: str) -> "EncryptedStore":
        """
        Open an existing store and verify the master password.

        A failed open never writes to the file.

        Raises:
            StoreNotFound: No (non-empty) file at ``path``
            AuthenticationFailed: The password does not decrypt the file
            StorageError: I/O failure, or the file is not a credential store
        """
        path = Path(path)
        if not cls.exists(path):
            raise StoreNotFound(f"Could not find database file at {path}")

        audit = get_audit_logger()
        try:
            conn = connect(path, master_password)
        except sqlcipher.Error as e:
            raise StorageError(f"Failed to open database at {path}: {e}") from e

        try:
            tables = {
                row[0] for row in conn.execute(
                    "SELECT name FROM sqlite_master WHERE type = 'table'"
                )
            }
        except sqlcipher.OperationalError as e:
            conn.close()
            audit.log_event(
                event_type=EventType.VAULT_ERROR,
                severity=EventSeverity.CRITICAL,
                message=f"Database read failed: {e}",
                details={"path": str(path)},
            )
            raise StorageError(f"Failed to read database at {path}: {e}") from e
        except sqlcipher.DatabaseError as e:
            # NOTADB and any other decryption failure are reported as a wrong password
            conn.close()
            audit.log_event(
                event_type=EventType.VAULT_UNLOCK_FAILED,
                severity=EventSeverity.ALERT,
                message="Database unlock failed: incorrect master password",
                details={"path": str(path)},
            )
            raise AuthenticationFailed(
                "Could not decrypt database. Please check the password and try again."
            ) from e

        missing = [spec.table for spec in TABLES.values() if spec.table not in tables]
        if missing:
            conn.close()
            raise StorageError(
                f"{path} is not a credential store (missing tables: {', '.join(missing)})"
            )

        configure(conn)
        audit.log_vault_event(
            EventType.VAULT_UNLOCKED,
            "Database unlocked",
            details={"path": str(path)},
        )
        return cls(path, conn)

    @classmethod
    def rekey(
        cls,
        path: Union[str, Path],
        old_password: str,
        new_password: str,
    ) -> None:
        """
        Re-encrypt the store at ``path`` under ``new_password``.

        Either the new password takes effect or the old one stays valid.

        Raises:
            Everything open() raises, plus InvalidMasterPassword for an
            empty ``new_password``.
        """
        _require_password(new_password)
        with cls.open(path, old_password) as store:
            store.change_key(new_password)

    def change_key(self, new_password: str) -> None:
        """Rekey this open store in place (PRAGMA rekey)."""
        _require_password(new_password)
        try:
            apply_key(self.connection, new_password, rekey=True)
        except sqlcipher.Error as e:
            self.audit.log_event(
                event_type=EventType.VAULT_ERROR,
                severity=EventSeverity.CRITICAL,
                message=f"Rekey failed: {e}",
                details={"path": str(self.path)},
            )
            raise StorageError(f"Failed to change master password: {e}") from e

        self.audit.log_vault_event(
            EventType.VAULT_REKEYED,
            "Master password changed",
            details={"path": str(self.path)},
        )

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        self.audit.log_vault_event(
            EventType.VAULT_LOCKED,
            "Database locked",
            details={"path": str(self.path)},
        )

    # ── Accessors ───────────────────────────────────────────────────

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> sqlcipher.Connection:
        if self._conn is None:
            raise StorageError(f"Database {self.path} is closed")
        return self._conn

    def __enter__(self) -> "EncryptedStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<EncryptedStore {self.path} ({state})>"


def _require_password(password: str) -> None:
    # SQLCipher treats an empty key as "no encryption"
    if not password:
        raise InvalidMasterPassword("Master password cannot be empty")
