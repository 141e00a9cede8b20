# Configuration - Environment Resolution
#
# Resolves where the encrypted store and the audit log live.
# Values come from the process environment, with a .env file in the working
# directory (python-dotenv) filling in anything not already set.
#
#   CMAN_DBFILE     path to the credential database   (default: ~/.creds.db)
#   CMAN_AUDIT_DIR  directory for audit logs          (default: ~/.cman/audit_logs)
#   CMAN_PASSLEN    default generated password length (default: 16)

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .core import audit_log
from .vault.exceptions import ConfigError

DB_ENV_VAR = "CMAN_DBFILE"
AUDIT_DIR_ENV_VAR = "CMAN_AUDIT_DIR"
PASSLEN_ENV_VAR = "CMAN_PASSLEN"

DEFAULT_DB_FILENAME = ".creds.db"


@dataclass
class Settings:
    """Resolved runtime settings for one cman invocation."""
    db_path: Path
    audit_log_dir: Path
    password_length: Optional[int] = None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        environ: Mapping to read instead of os.environ (skips .env loading)

    Raises:
        ConfigError: CMAN_PASSLEN is set but is not an integer
    """
    if environ is None:
        load_dotenv(Path.cwd() / ".env", override=False)
        environ = os.environ

    passlen = environ.get(PASSLEN_ENV_VAR) or None
    if passlen is not None:
        try:
            passlen = int(passlen)
        except ValueError:
            raise ConfigError(f"{PASSLEN_ENV_VAR} must be an integer, got {passlen!r}") from None

    return Settings(
        db_path=_path_or_default(environ.get(DB_ENV_VAR), Path.home() / DEFAULT_DB_FILENAME),
        audit_log_dir=_path_or_default(environ.get(AUDIT_DIR_ENV_VAR), audit_log.DEFAULT_AUDIT_DIR),
        password_length=passlen,
    )


def _path_or_default(value: Optional[str], default: Path) -> Path:
    # An empty variable counts as unset
    if value:
        return Path(value).expanduser()
    return default
