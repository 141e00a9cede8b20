"""
Shared pytest fixtures for the credman test suite.

The autouse fixture below isolates tests from the live user data:
  - Audit logger -> temp directory (prevents test events in ~/.cman/audit_logs)

Stores are real SQLCipher files under tmp_path. Opening one runs SQLCipher's
key derivation, so fixtures hand out an already-open store where they can.
"""

import pytest

MASTER_PASSWORD = "correct horse battery staple"


@pytest.fixture(autouse=True)
def _isolate_audit_logs(tmp_path, monkeypatch):
    """Redirect the global AuditLogger to a temp directory for every test.

    Without this, any test that (directly or indirectly) calls
    ``get_audit_logger().log_event(...)`` writes into the real
    ``~/.cman/audit_logs/`` directory.
    """
    import credman.core.audit_log as audit_mod

    # Reset the singleton so the next call to get_audit_logger() creates
    # a fresh instance pointing at the temp directory.
    old_logger = audit_mod._audit_logger
    audit_mod._audit_logger = None
    monkeypatch.setattr(audit_mod, "DEFAULT_AUDIT_DIR", tmp_path / "audit_logs")

    yield

    audit_mod._audit_logger = old_logger


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "creds.db"


@pytest.fixture
def store(store_path):
    """A freshly created, open store; closed at teardown."""
    from credman.vault.store import EncryptedStore

    s = EncryptedStore.create(store_path, MASTER_PASSWORD)
    yield s
    s.close()


@pytest.fixture
def records(store):
    from credman.vault.records import RecordOperations

    return RecordOperations(store)


@pytest.fixture
def settings(tmp_path, store_path):
    from credman.config import Settings

    return Settings(
        db_path=store_path,
        audit_log_dir=tmp_path / "audit_logs",
        password_length=None,
    )
