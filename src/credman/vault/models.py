"""
Vault Data Models

A secret is either a LoginCredential or an ApiKey. The two shapes share no
base class; code that needs to tell them apart switches on ``kind``.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import ClassVar, Dict, FrozenSet, Union

from .exceptions import EmptyName, InvalidField, ReservedName

# Reserved for the master password (``cman change master`` rekeys the store)
RESERVED_NAME = "master"


class SecretKind(str, Enum):
    """Discriminator for the two secret shapes."""
    LOGIN = "login"
    API = "api"

    @property
    def label(self) -> str:
        return "Login credential" if self is SecretKind.LOGIN else "API key"


class SecretField(str, Enum):
    """Mutable fields a caller can read or update by name."""
    USERNAME = "user"
    NAME = "secname"
    PASSWORD = "pass"
    DESCRIPTION = "desc"
    KEY = "key"

    @property
    def label(self) -> str:
        return _FIELD_LABELS[self]

    @classmethod
    def _missing_(cls, value):
        # Record attribute names ("username", "password", ...) are accepted too
        for member, attribute in FIELD_ATTRIBUTES.items():
            if value == attribute:
                return member
        return None


_FIELD_LABELS = {
    SecretField.USERNAME: "User",
    SecretField.NAME: "Name",
    SecretField.PASSWORD: "Pass",
    SecretField.DESCRIPTION: "Desc",
    SecretField.KEY: "Key",
}

# SecretField -> dataclass attribute
FIELD_ATTRIBUTES = {
    SecretField.NAME: "name",
    SecretField.USERNAME: "username",
    SecretField.PASSWORD: "password",
    SecretField.DESCRIPTION: "description",
    SecretField.KEY: "key",
}


@dataclass
class LoginCredential:
    """Username/password pair stored under a unique name."""
    name: str
    username: str
    password: str

    kind: ClassVar[SecretKind] = SecretKind.LOGIN
    MUTABLE_FIELDS: ClassVar[FrozenSet[SecretField]] = frozenset({
        SecretField.USERNAME,
        SecretField.NAME,
        SecretField.PASSWORD,
    })

    def get_field(self, field: SecretField) -> str:
        validate_field(self.kind, field)
        return getattr(self, FIELD_ATTRIBUTES[SecretField(field)])

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class ApiKey:
    """API key with the account it belongs to and a short description."""
    name: str
    username: str
    description: str
    key: str

    kind: ClassVar[SecretKind] = SecretKind.API
    MUTABLE_FIELDS: ClassVar[FrozenSet[SecretField]] = frozenset({
        SecretField.USERNAME,
        SecretField.NAME,
        SecretField.DESCRIPTION,
        SecretField.KEY,
    })

    def get_field(self, field: SecretField) -> str:
        validate_field(self.kind, field)
        return getattr(self, FIELD_ATTRIBUTES[SecretField(field)])

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


Secret = Union[LoginCredential, ApiKey]

SECRET_TYPES = {
    SecretKind.LOGIN: LoginCredential,
    SecretKind.API: ApiKey,
}


def mutable_fields(kind: SecretKind) -> FrozenSet[SecretField]:
    """Return the fields that may be updated for ``kind``."""
    return SECRET_TYPES[SecretKind(kind)].MUTABLE_FIELDS


def validate_field(kind: SecretKind, field: SecretField) -> None:
    """
    Check that ``field`` belongs to ``kind``.

    Raises:
        InvalidField: If the field is not in the kind's mutable set
    """
    kind = SecretKind(kind)
    try:
        field = SecretField(field)
    except ValueError:
        raise InvalidField(f"Unknown field '{field}'") from None

    if field not in mutable_fields(kind):
        raise InvalidField(
            f"The field '{field.value}' is invalid for {_article(kind)} {kind.label.lower()}"
        )


def validate_name(kind: SecretKind, name: str) -> None:
    """
    Check a candidate secret name against the reserved and empty rules.

    Uniqueness is checked against the store by RecordOperations, not here.

    Raises:
        ReservedName: name is "master"
        EmptyName: name is the empty string
    """
    label = SecretKind(kind).label
    if name == RESERVED_NAME:
        raise ReservedName(
            f'{label} name cannot be "{RESERVED_NAME}" because it is reserved for the master password'
        )
    if name == "":
        raise EmptyName(f"{label} name cannot be empty")


def _article(kind: SecretKind) -> str:
    return "an" if kind is SecretKind.API else "a"
