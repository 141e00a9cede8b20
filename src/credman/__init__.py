# credman - Local Credential Vault
#
# Login credentials and API keys in a single SQLCipher-encrypted file,
# managed from the `cman` command line.

__version__ = "0.3.0"
__description__ = "Local encrypted store for login credentials and API keys"

from .vault import (
    ApiKey,
    BatchImporter,
    EncryptedStore,
    LoginCredential,
    RecordOperations,
    SecretField,
    SecretKind,
)

__all__ = [
    "__version__",
    "ApiKey",
    "BatchImporter",
    "EncryptedStore",
    "LoginCredential",
    "RecordOperations",
    "SecretField",
    "SecretKind",
]
