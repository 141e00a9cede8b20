"""Console and JSON rendering for the cman command line.

Verbosity is carried by a Console instance handed to every printer and
prompt; nothing in the vault package reads or sets it.
"""

import json
import sys
from dataclasses import dataclass, field
from typing import Iterable, TextIO

from ..vault.models import Secret, SecretField, SecretKind

# Display order of fields for each kind
DISPLAY_FIELDS = {
    SecretKind.LOGIN: (SecretField.NAME, SecretField.USERNAME, SecretField.PASSWORD),
    SecretKind.API: (
        SecretField.NAME,
        SecretField.USERNAME,
        SecretField.DESCRIPTION,
        SecretField.KEY,
    ),
}

# JSON key for a single-field payload, matching Secret.to_dict()
JSON_KEYS = {
    SecretField.NAME: "name",
    SecretField.USERNAME: "username",
    SecretField.PASSWORD: "password",
    SecretField.DESCRIPTION: "description",
    SecretField.KEY: "key",
}


@dataclass
class Console:
    """
    Output settings for one invocation.

    Args:
        quiet: Drop labels, prompt text and status messages; print bare values
        json_mode: Render secrets as JSON instead of labelled lines
    """
    quiet: bool = False
    json_mode: bool = False
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)

    def prompt_text(self, message: str) -> str:
        return "" if self.quiet else f"{message}: "

    def info(self, message: str) -> None:
        if not self.quiet:
            print(message, file=self.stdout)

    def error(self, message: str) -> None:
        print(message, file=self.stderr)

    def print_result(self, label: str, value: str) -> None:
        if self.quiet:
            print(value, file=self.stdout)
        else:
            print(f"{label}:   {value}", file=self.stdout)

    def show_secret(self, secret: Secret) -> None:
        if self.json_mode:
            self._dump(secret.to_dict())
            return
        for secret_field in DISPLAY_FIELDS[secret.kind]:
            self.print_result(secret_field.label, secret.get_field(secret_field))
        print(file=self.stdout)

    def show_field(self, secret: Secret, secret_field: SecretField) -> None:
        value = secret.get_field(secret_field)
        if self.json_mode:
            self._dump({JSON_KEYS[secret_field]: value})
        else:
            self.print_result(secret_field.label, value)

    def show_secrets(self, secrets: Iterable[Secret]) -> None:
        secrets = list(secrets)
        if self.json_mode:
            self._dump([secret.to_dict() for secret in secrets])
            return
        for secret in secrets:
            self.show_secret(secret)

    def show_names(self, heading: str, names: Iterable[str]) -> None:
        names = list(names)
        if names:
            self.info(f"\n{heading}")
            print(" ".join(names), file=self.stdout)

    def _dump(self, payload) -> None:
        print(json.dumps(payload, indent=2), file=self.stdout)
