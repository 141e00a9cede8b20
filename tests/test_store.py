"""Tests for the encrypted store lifecycle: create, open, rekey, close."""

import pytest

from credman.vault.exceptions import (
    AlreadyExists,
    AuthenticationFailed,
    InvalidMasterPassword,
    NotFound,
    StorageError,
    StoreNotFound,
)
from credman.vault.models import ApiKey, LoginCredential, SecretKind
from credman.vault.records import RecordOperations
from credman.vault.store import EncryptedStore

from conftest import MASTER_PASSWORD


# ── Create ──────────────────────────────────────────────────────────


class TestCreate:

    def test_creates_file_with_both_tables(self, store_path):
        with EncryptedStore.create(store_path, MASTER_PASSWORD) as store:
            assert store.is_open
            tables = {
                row[0] for row in store.connection.execute(
                    "SELECT name FROM sqlite_master WHERE type = 'table'"
                )
            }
        assert store_path.stat().st_size > 0
        assert {"account", "api_keys"} <= tables

    def test_new_tables_are_empty(self, records):
        assert records.list_secrets(SecretKind.LOGIN) == []
        assert records.list_secrets(SecretKind.API) == []

    def test_existing_file_raises(self, store_path):
        store_path.write_bytes(b"not empty")
        with pytest.raises(AlreadyExists):
            EncryptedStore.create(store_path, MASTER_PASSWORD)
        assert store_path.read_bytes() == b"not empty"

    def test_stale_empty_file_is_replaced(self, store_path):
        store_path.touch()
        with EncryptedStore.create(store_path, MASTER_PASSWORD):
            pass
        assert EncryptedStore.exists(store_path)

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "creds.db"
        with EncryptedStore.create(path, MASTER_PASSWORD):
            pass
        assert path.exists()

    def test_empty_master_password_rejected(self, store_path):
        with pytest.raises(InvalidMasterPassword):
            EncryptedStore.create(store_path, "")
        assert not store_path.exists()

    def test_file_is_encrypted(self, store_path):
        with EncryptedStore.create(store_path, MASTER_PASSWORD) as store:
            RecordOperations(store).insert(
                LoginCredential(name="plaintext-probe", username="u", password="p")
            )
        raw = store_path.read_bytes()
        assert not raw.startswith(b"SQLite format 3")
        assert b"plaintext-probe" not in raw


# ── Open ────────────────────────────────────────────────────────────


class TestOpen:

    def test_missing_file(self, store_path):
        with pytest.raises(StoreNotFound):
            EncryptedStore.open(store_path, MASTER_PASSWORD)

    def test_store_not_found_is_not_found(self):
        assert issubclass(StoreNotFound, NotFound)

    def test_zero_byte_file_counts_as_missing(self, store_path):
        store_path.touch()
        with pytest.raises(StoreNotFound):
            EncryptedStore.open(store_path, MASTER_PASSWORD)

    def test_correct_password(self, store_path):
        EncryptedStore.create(store_path, MASTER_PASSWORD).close()
        with EncryptedStore.open(store_path, MASTER_PASSWORD) as store:
            assert store.is_open

    def test_wrong_password(self, store_path):
        EncryptedStore.create(store_path, MASTER_PASSWORD).close()
        with pytest.raises(AuthenticationFailed):
            EncryptedStore.open(store_path, "wrong password")

    def test_wrong_password_does_not_touch_file(self, store_path):
        EncryptedStore.create(store_path, MASTER_PASSWORD).close()
        before = store_path.read_bytes()
        with pytest.raises(AuthenticationFailed):
            EncryptedStore.open(store_path, "wrong password")
        assert store_path.read_bytes() == before

    def test_garbage_file_reported_as_authentication_failure(self, store_path):
        store_path.write_bytes(b"\x00garbage" * 512)
        with pytest.raises(AuthenticationFailed):
            EncryptedStore.open(store_path, MASTER_PASSWORD)

    def test_database_without_secret_tables(self, store_path):
        from credman.core.db import connect

        conn = connect(store_path, MASTER_PASSWORD)
        conn.execute("CREATE TABLE unrelated (id INTEGER)")
        conn.commit()
        conn.close()

        with pytest.raises(StorageError, match="not a credential store"):
            EncryptedStore.open(store_path, MASTER_PASSWORD)

    def test_password_with_quotes(self, store_path):
        password = "it's a \"quoted\" pass'word"
        EncryptedStore.create(store_path, password).close()
        with EncryptedStore.open(store_path, password) as store:
            assert store.is_open


# ── Rekey ───────────────────────────────────────────────────────────


class TestRekey:

    def _populate(self, path):
        with EncryptedStore.create(path, MASTER_PASSWORD) as store:
            records = RecordOperations(store)
            records.insert(LoginCredential(name="github", username="octocat", password="pw1"))
            records.insert(ApiKey(name="openai", username="me", description="chat", key="sk-1"))

    def _snapshot(self, store):
        records = RecordOperations(store)
        return (
            records.list_secrets(SecretKind.LOGIN),
            records.list_secrets(SecretKind.API),
        )

    def test_old_password_stops_working(self, store_path):
        self._populate(store_path)
        EncryptedStore.rekey(store_path, MASTER_PASSWORD, "new master")

        with pytest.raises(AuthenticationFailed):
            EncryptedStore.open(store_path, MASTER_PASSWORD)

    def test_new_password_sees_same_records(self, store_path):
        self._populate(store_path)
        with EncryptedStore.open(store_path, MASTER_PASSWORD) as store:
            before = self._snapshot(store)

        EncryptedStore.rekey(store_path, MASTER_PASSWORD, "new master")

        with EncryptedStore.open(store_path, "new master") as store:
            assert self._snapshot(store) == before

    def test_wrong_old_password(self, store_path):
        self._populate(store_path)
        with pytest.raises(AuthenticationFailed):
            EncryptedStore.rekey(store_path, "wrong", "new master")

        with EncryptedStore.open(store_path, MASTER_PASSWORD) as store:
            assert store.is_open

    def test_empty_new_password(self, store_path):
        self._populate(store_path)
        with pytest.raises(InvalidMasterPassword):
            EncryptedStore.rekey(store_path, MASTER_PASSWORD, "")

        with EncryptedStore.open(store_path, MASTER_PASSWORD) as store:
            assert store.is_open

    def test_change_key_on_open_store(self, store):
        store.change_key("rotated")
        store.close()

        with EncryptedStore.open(store.path, "rotated") as reopened:
            assert reopened.is_open


# ── Close ───────────────────────────────────────────────────────────


class TestClose:

    def test_close_is_idempotent(self, store):
        store.close()
        store.close()
        assert not store.is_open

    def test_closed_store_rejects_use(self, store):
        store.close()
        with pytest.raises(StorageError):
            store.connection

    def test_context_manager_closes_on_error(self, store_path):
        with pytest.raises(RuntimeError):
            with EncryptedStore.create(store_path, MASTER_PASSWORD) as store:
                raise RuntimeError("boom")
        assert not store.is_open

    def test_repr_shows_state(self, store):
        assert "open" in repr(store)
        store.close()
        assert "closed" in repr(store)
