"""
Vault Exception Classes
"""


class CredmanException(Exception):
    """Base exception for credential vault operations"""
    pass


class AlreadyExists(CredmanException):
    """Raised when a store file is already present at the target path"""
    pass


class NotFound(CredmanException):
    """Raised when a store, secret or batch source does not exist"""
    pass


class StoreNotFound(NotFound):
    """Raised when the encrypted database file is missing"""
    pass


class SecretNotFound(NotFound):
    """Raised when no secret of the requested kind has the given name"""
    pass


class BatchSourceNotFound(NotFound):
    """Raised when a batch import file cannot be found"""
    pass


class AuthenticationFailed(CredmanException):
    """Raised when the master password does not decrypt the store"""
    pass


class DuplicateName(CredmanException):
    """Raised when a secret name is already taken within its kind"""
    pass


class ReservedName(CredmanException):
    """Raised when a secret would take the reserved name 'master'"""
    pass


class InvalidField(CredmanException):
    """Raised when a field is not mutable for the secret's kind"""
    pass


class EmptyName(CredmanException):
    """Raised when a secret name is empty"""
    pass


class UnrecognizedKind(CredmanException):
    """Raised when a batch line does not start with a known kind"""
    pass


class FieldCountMismatch(CredmanException):
    """Raised when a batch line has the wrong number of fields for its kind"""
    pass


class StorageError(CredmanException):
    """Raised when the underlying storage engine fails"""
    pass


class MismatchError(CredmanException):
    """Raised when a confirmation input does not match the first entry"""
    pass


class InputAborted(CredmanException):
    """Raised when interactive input ends before an answer is given"""
    pass


class InvalidMasterPassword(CredmanException):
    """Raised when a master password cannot be used as an encryption key"""
    pass


class InvalidPasswordLength(CredmanException):
    """Raised when a generated password length is out of range"""
    pass


class ConfigError(CredmanException):
    """Raised when configuration values cannot be parsed"""
    pass
