"""Tests for the secret model: kinds, field sets and name validation."""

import pytest

from credman.vault.exceptions import EmptyName, InvalidField, ReservedName
from credman.vault.models import (
    ApiKey,
    LoginCredential,
    SecretField,
    SecretKind,
    mutable_fields,
    validate_field,
    validate_name,
)


# ── Field sets ──────────────────────────────────────────────────────


class TestMutableFields:

    def test_login_fields(self):
        assert mutable_fields(SecretKind.LOGIN) == {
            SecretField.USERNAME, SecretField.NAME, SecretField.PASSWORD,
        }

    def test_api_fields(self):
        assert mutable_fields(SecretKind.API) == {
            SecretField.USERNAME, SecretField.NAME, SecretField.DESCRIPTION, SecretField.KEY,
        }

    def test_kind_accepts_plain_string(self):
        assert mutable_fields("api") == ApiKey.MUTABLE_FIELDS

    @pytest.mark.parametrize("field", [SecretField.DESCRIPTION, SecretField.KEY])
    def test_api_only_fields_invalid_for_login(self, field):
        with pytest.raises(InvalidField, match="login credential"):
            validate_field(SecretKind.LOGIN, field)

    def test_password_invalid_for_api_key(self):
        with pytest.raises(InvalidField, match="an api key"):
            validate_field(SecretKind.API, SecretField.PASSWORD)

    def test_unknown_field_name(self):
        with pytest.raises(InvalidField, match="Unknown field"):
            validate_field(SecretKind.LOGIN, "colour")

    def test_valid_field_passes(self):
        validate_field(SecretKind.API, "desc")

    @pytest.mark.parametrize("name, member", [
        ("username", SecretField.USERNAME),
        ("name", SecretField.NAME),
        ("password", SecretField.PASSWORD),
        ("description", SecretField.DESCRIPTION),
        ("key", SecretField.KEY),
    ])
    def test_attribute_names_accepted(self, name, member):
        assert SecretField(name) is member

    def test_attribute_name_still_checked_against_kind(self):
        with pytest.raises(InvalidField, match="login credential"):
            validate_field(SecretKind.LOGIN, "description")


# ── Name rules ──────────────────────────────────────────────────────


class TestValidateName:

    @pytest.mark.parametrize("kind", list(SecretKind))
    def test_master_is_reserved(self, kind):
        with pytest.raises(ReservedName):
            validate_name(kind, "master")

    @pytest.mark.parametrize("kind", list(SecretKind))
    def test_empty_name(self, kind):
        with pytest.raises(EmptyName):
            validate_name(kind, "")

    def test_reserved_match_is_exact(self):
        validate_name(SecretKind.LOGIN, "Master")
        validate_name(SecretKind.LOGIN, "master2")


# ── Records ─────────────────────────────────────────────────────────


class TestSecretShapes:

    def test_login_get_field(self):
        login = LoginCredential(name="github", username="octocat", password="pw")
        assert login.get_field(SecretField.USERNAME) == "octocat"
        assert login.get_field(SecretField.NAME) == "github"
        assert login.get_field(SecretField.PASSWORD) == "pw"

    def test_login_rejects_api_field(self):
        login = LoginCredential(name="github", username="octocat", password="pw")
        with pytest.raises(InvalidField):
            login.get_field(SecretField.KEY)

    def test_api_to_dict(self):
        api = ApiKey(name="openai", username="me", description="chat", key="sk-1")
        assert api.to_dict() == {
            "name": "openai", "username": "me", "description": "chat", "key": "sk-1",
        }

    def test_kind_is_not_a_dataclass_field(self):
        login = LoginCredential(name="a", username="b", password="c")
        assert login.kind is SecretKind.LOGIN
        assert "kind" not in login.to_dict()
