"""Batch import of secrets from a comma-separated text source.

Line format (one secret per line, 1-based line numbers):

    login,<name>,<username>,<password>
    api,<name>,<username>,<description>,<key>

A login password of ``?`` is replaced by a generated password. Lines that
are empty, or hold nothing but commas and whitespace, are skipped but still
count towards the line number.

A failing line never aborts the run: its error is recorded against its line
number and the import moves on to the next line.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from ..core import EventSeverity, EventType
from .passgen import generate_password, validate_length
from .exceptions import (
    BatchSourceNotFound,
    CredmanException,
    DuplicateName,
    FieldCountMismatch,
    StorageError,
    UnrecognizedKind,
)
from .models import ApiKey, LoginCredential, Secret, SecretKind, validate_name
from .records import RecordOperations

logger = logging.getLogger(__name__)

GENERATE_PLACEHOLDER = "?"

FIELD_COUNTS = {
    SecretKind.LOGIN: 4,
    SecretKind.API: 5,
}


@dataclass
class ImportFailure:
    """One rejected line."""
    line_number: int
    error: CredmanException

    @property
    def message(self) -> str:
        return f"Line {self.line_number}: {self.error}"


@dataclass
class ImportSummary:
    """Outcome of one import run, in input order."""
    successes: List[str] = field(default_factory=list)
    failures: List[ImportFailure] = field(default_factory=list)

    @property
    def failed_lines(self) -> List[int]:
        return [failure.line_number for failure in self.failures]

    @property
    def ok(self) -> bool:
        return not self.failures


class BatchImporter:
    """
    Apply many record-creation lines through RecordOperations.

    Args:
        records: Record operations bound to an open store
        password_length: Length of generated passwords (default 16)
        generator: Password generator, called with ``password_length``
    """

    def __init__(
        self,
        records: RecordOperations,
        password_length: Optional[int] = None,
        generator: Callable[[Optional[int]], str] = generate_password,
    ):
        self.records = records
        # Fail before any line is processed rather than on the first "?"
        self.password_length = validate_length(password_length)
        self.generator = generator

    def import_file(self, path: Union[str, Path]) -> ImportSummary:
        """
        Import every line of the file at ``path``.

        Raises:
            BatchSourceNotFound: The file does not exist
            StorageError: The file exists but cannot be read
        """
        path = Path(path)
        # Decode the whole source before touching the store
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError as e:
            raise BatchSourceNotFound(f"Batch file {path} not found") from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read batch file {path}: {e}") from e

        return self.import_lines(lines)

    def import_lines(self, lines: Iterable[str]) -> ImportSummary:
        """Import ``lines`` in order, collecting per-line outcomes."""
        summary = ImportSummary()

        for line_number, raw in enumerate(lines, start=1):
            line = raw.strip()
            if _is_blank(line):
                continue

            try:
                secret = self._parse(line)
                self.records.insert(secret)
            except CredmanException as e:
                logger.debug("Batch line %d rejected: %s", line_number, e)
                summary.failures.append(ImportFailure(line_number, e))
            else:
                summary.successes.append(secret.name)

        self.records.store.audit.log_event(
            event_type=EventType.BATCH_IMPORTED,
            severity=EventSeverity.INFO if summary.ok else EventSeverity.INVESTIGATE,
            message=f"Batch import: {len(summary.successes)} added, {len(summary.failures)} failed",
            details={
                "added": summary.successes,
                "failed_lines": summary.failed_lines,
            },
        )
        return summary

    def _parse(self, line: str) -> Secret:
        """Turn one non-blank line into a secret, checking it against the store.

        Checks run in order: field count, duplicate name, reserved name, empty name.
        """
        fields = line.split(",")
        try:
            kind = SecretKind(fields[0])
        except ValueError:
            raise UnrecognizedKind("First field should be 'login' or 'api'") from None

        expected = FIELD_COUNTS[kind]
        if len(fields) != expected:
            raise FieldCountMismatch(
                f"Wrong number of fields (expected {expected} for {kind.value}, got {len(fields)})"
            )

        name = fields[1]
        if self.records.exists(kind, name):
            raise DuplicateName(f"{kind.label} {name} already exists")
        validate_name(kind, name)

        if kind is SecretKind.LOGIN:
            _, name, username, password = fields
            if password == GENERATE_PLACEHOLDER:
                password = self.generator(self.password_length)
            return LoginCredential(name=name, username=username, password=password)

        _, name, username, description, key = fields
        return ApiKey(name=name, username=username, description=description, key=key)


def _is_blank(line: str) -> bool:
    return not line.replace(",", "").strip()
