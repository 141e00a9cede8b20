# Vault - Record Operations
#
# CRUD for login credentials and API keys against an open EncryptedStore.
# Enforces the per-kind invariants: unique names, the reserved "master"
# name, and the fixed set of mutable fields.

import logging
from typing import List

from sqlcipher3 import dbapi2 as sqlcipher

from ..core import EventType
from .exceptions import DuplicateName, SecretNotFound, StorageError
from .models import (
    FIELD_ATTRIBUTES,
    SECRET_TYPES,
    Secret,
    SecretField,
    SecretKind,
    validate_field,
    validate_name,
)
from .store import TABLES, EncryptedStore

logger = logging.getLogger(__name__)


class RecordOperations:
    """
    Secret CRUD on an open store.

    Borrows the store's connection; never closes it. Every write runs in its
    own transaction, so a record is either fully written or not at all.
    """

    def __init__(self, store: EncryptedStore):
        self.store = store

    @property
    def _conn(self) -> sqlcipher.Connection:
        return self.store.connection

    # ── Queries ─────────────────────────────────────────────────────

    def exists(self, kind: SecretKind, name: str) -> bool:
        """Exact-match lookup of ``name`` within ``kind``."""
        spec = TABLES[SecretKind(kind)]
        row = self._fetchone(
            f"SELECT EXISTS(SELECT 1 FROM {spec.table} WHERE {spec.name_column} = ?)",
            (name,),
        )
        return bool(row[0])

    def get(self, kind: SecretKind, name: str) -> Secret:
        """
        Retrieve a full record.

        Raises:
            SecretNotFound: No record of ``kind`` named ``name``
        """
        kind = SecretKind(kind)
        spec = TABLES[kind]
        row = self._fetchone(
            f"SELECT {self._select_columns(kind)} FROM {spec.table} WHERE {spec.name_column} = ?",
            (name,),
        )
        if row is None:
            raise SecretNotFound(f"{kind.label} {name} not found")

        self.store.audit.log_vault_event(
            EventType.SECRET_ACCESSED,
            f"{kind.label} accessed: {name}",
            details={"kind": kind.value, "name": name},
        )
        return self._to_secret(kind, row)

    def list_secrets(self, kind: SecretKind) -> List[Secret]:
        """All records of ``kind`` in insertion order (empty list if none)."""
        kind = SecretKind(kind)
        spec = TABLES[kind]
        rows = self._fetchall(
            f"SELECT {self._select_columns(kind)} FROM {spec.table} ORDER BY {spec.id_column}"
        )
        return [self._to_secret(kind, row) for row in rows]

    def names(self, kind: SecretKind) -> List[str]:
        """Names of all records of ``kind``, in the same order as list_secrets()."""
        spec = TABLES[SecretKind(kind)]
        rows = self._fetchall(
            f"SELECT {spec.name_column} FROM {spec.table} ORDER BY {spec.id_column}"
        )
        return [row[0] for row in rows]

    # ── Mutations ───────────────────────────────────────────────────

    def insert(self, secret: Secret) -> None:
        """
        Persist a new secret.

        Raises:
            DuplicateName: A record of the same kind already has this name
            ReservedName: The name is "master"
            EmptyName: The name is empty
        """
        if not isinstance(secret, tuple(SECRET_TYPES.values())):
            raise TypeError(f"Expected LoginCredential or ApiKey, got {type(secret).__name__}")

        kind = secret.kind
        if self.exists(kind, secret.name):
            raise DuplicateName(f"{kind.label} {secret.name} already exists")
        validate_name(kind, secret.name)

        spec = TABLES[kind]
        columns = list(spec.columns.values())
        values = [getattr(secret, FIELD_ATTRIBUTES[field]) for field in spec.columns]
        placeholders = ", ".join("?" for _ in columns)
        self._write(
            f"INSERT INTO {spec.table} ({', '.join(columns)}) VALUES ({placeholders})",
            values,
            duplicate_name=secret.name,
            kind=kind,
        )

        self.store.audit.log_vault_event(
            EventType.SECRET_ADDED,
            f"{kind.label} added: {secret.name}",
            details={"kind": kind.value, "name": secret.name},
        )

    def update_field(
        self,
        kind: SecretKind,
        name: str,
        field: SecretField,
        new_value: str,
    ) -> None:
        """
        Change one field of one record.

        Raises:
            SecretNotFound: No record of ``kind`` named ``name``
            InvalidField: ``field`` is not mutable for ``kind``
                (fields are given as SecretField members, CLI codes such as
                "pass", or attribute names such as "password")
            DuplicateName / ReservedName / EmptyName: renaming to an
                unusable name
        """
        kind = SecretKind(kind)
        if not self.exists(kind, name):
            raise SecretNotFound(f"{kind.label} {name} does not exist")
        validate_field(kind, field)
        field = SecretField(field)

        if field is SecretField.NAME:
            if new_value == name:
                return
            if self.exists(kind, new_value):
                raise DuplicateName(f"{kind.label} with name {new_value} already exists")
            validate_name(kind, new_value)

        spec = TABLES[kind]
        self._write(
            f"UPDATE {spec.table} SET {spec.columns[field]} = ? WHERE {spec.name_column} = ?",
            (new_value, name),
            duplicate_name=new_value,
            kind=kind,
        )

        self.store.audit.log_vault_event(
            EventType.SECRET_CHANGED,
            f"{kind.label} changed: {name}",
            details={"kind": kind.value, "name": name, "field": field.value},
        )

    def delete(self, kind: SecretKind, name: str) -> None:
        """
        Remove one record.

        Raises:
            SecretNotFound: No record of ``kind`` named ``name``
        """
        kind = SecretKind(kind)
        if not self.exists(kind, name):
            raise SecretNotFound(f"{kind.label} {name} does not exist")

        spec = TABLES[kind]
        self._write(
            f"DELETE FROM {spec.table} WHERE {spec.name_column} = ?",
            (name,),
            kind=kind,
        )

        self.store.audit.log_vault_event(
            EventType.SECRET_DELETED,
            f"{kind.label} deleted: {name}",
            details={"kind": kind.value, "name": name},
        )

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    def _select_columns(kind: SecretKind) -> str:
        return ", ".join(TABLES[kind].columns.values())

    @staticmethod
    def _to_secret(kind: SecretKind, row) -> Secret:
        fields = TABLES[kind].columns
        # Columns other than the name are nullable in databases from older releases
        values = {
            FIELD_ATTRIBUTES[field]: value if value is not None else ""
            for field, value in zip(fields, row)
        }
        return SECRET_TYPES[kind](**values)

    def _fetchone(self, query: str, params=()):
        try:
            return self._conn.execute(query, params).fetchone()
        except sqlcipher.Error as e:
            raise StorageError(f"Database read failed: {e}") from e

    def _fetchall(self, query: str, params=()):
        try:
            return self._conn.execute(query, params).fetchall()
        except sqlcipher.Error as e:
            raise StorageError(f"Database read failed: {e}") from e

    def _write(self, query: str, params, *, kind: SecretKind, duplicate_name: str = "") -> int:
        try:
            with self._conn:
                cursor = self._conn.execute(query, params)
        except sqlcipher.IntegrityError as e:
            raise DuplicateName(f"{kind.label} {duplicate_name} already exists") from e
        except sqlcipher.Error as e:
            raise StorageError(f"Database write failed: {e}") from e

        logger.debug("%s affected %d row(s)", query.split()[0], cursor.rowcount)
        return cursor.rowcount
