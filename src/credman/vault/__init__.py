# Vault Module - Encrypted Secret Store
#
# Login credentials and API keys in a SQLCipher database
# Master password is the database key (PRAGMA key / PRAGMA rekey)

from .batch import BatchImporter, ImportFailure, ImportSummary
from .models import ApiKey, LoginCredential, Secret, SecretField, SecretKind
from .records import RecordOperations
from .store import EncryptedStore

__all__ = [
    "ApiKey",
    "BatchImporter",
    "EncryptedStore",
    "ImportFailure",
    "ImportSummary",
    "LoginCredential",
    "RecordOperations",
    "Secret",
    "SecretField",
    "SecretKind",
]
