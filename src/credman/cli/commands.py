# CLI - cman commands
#
# argparse front end over the vault package. Each handler receives the open
# store, the resolved settings and the Console; errors from the vault are
# reported as one line on stderr by run().

import argparse
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .. import __version__
from ..config import DB_ENV_VAR, Settings, load_settings
from ..core import EventSeverity, EventType, configure_audit_logger, log_security_event
from ..vault import BatchImporter, EncryptedStore, RecordOperations
from ..vault.exceptions import (
    CredmanException,
    DuplicateName,
    SecretNotFound,
    StoreNotFound,
)
from ..vault.models import (
    RESERVED_NAME,
    ApiKey,
    LoginCredential,
    SecretField,
    SecretKind,
    validate_field,
    validate_name,
)
from ..vault.passgen import generate_password
from .output import Console
from .prompts import confirm, prompt, select_many, select_one

BATCH_HELP = """\
Rules for batch file:
1. Each line has comma separated details of a single secret with the type as the first field
2. For type 'login' the format is login,secretname,username,password
3. For type 'api' the format is api,secretname,username,description,key
4. If a login credential's password should be generated, use ? as a placeholder ie login,secretname,username,?

Note: If the --type argument is not given 'login' is assumed."""

TYPE_NOTE = "Note: If the --type argument is not given 'login' is assumed."

# Field changed by `cman change` when --field is omitted
DEFAULT_CHANGE_FIELD = {
    SecretKind.LOGIN: SecretField.PASSWORD,
    SecretKind.API: SecretField.KEY,
}

EMPTY_KIND_HINT = {
    SecretKind.LOGIN: "No accounts added yet. Use cman add <account_name> to add your first account.",
    SecretKind.API: "No api keys added yet. Use cman add -t api <api_name> to add your first api key.",
}


def build_parser() -> argparse.ArgumentParser:
    """Build the cman argument parser."""
    parser = argparse.ArgumentParser(
        prog="cman",
        description="A simple tool to manage and securely store secrets like login "
                    "credentials and API keys locally.",
        epilog=f"cman reads the credential database path from ${DB_ENV_VAR}. "
               "If it is not set, cman defaults to $HOME/.creds.db.",
    )
    parser.add_argument("--version", action="version", version=f"cman {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init", help="Create a new database.")
    init.add_argument(
        "-p", "--path",
        help=f"The path to initialise the database. If not given ${DB_ENV_VAR} is used else $HOME/.creds.db",
    )

    add = sub.add_parser(
        "add",
        help="Adds the given secret to storage.",
        epilog=BATCH_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add.add_argument(
        "secret",
        help=f'The name of the secret to add. "{RESERVED_NAME}" cannot be used as a name.',
    )
    _add_type_argument(add)
    add.add_argument(
        "-b", "--batch", action="store_true",
        help="Treat SECRET as a file containing credentials one per line.",
    )
    _add_password_arguments(add)

    change = sub.add_parser("change", help="Alters details of a particular secret.", epilog=TYPE_NOTE)
    change.add_argument(
        "secret", nargs="?",
        help=f'The secret to change. If "{RESERVED_NAME}" is given the master password is changed.',
    )
    _add_type_argument(change)
    _add_field_argument(change, "The field to change.")
    _add_password_arguments(change)

    get = sub.add_parser("get", help="Retrieves details about a particular secret.", epilog=TYPE_NOTE)
    get.add_argument("secret", nargs="?", help="The name of the secret to retrieve.")
    _add_type_argument(get)
    _add_field_argument(get, "An optional field to get. If not set all details are retrieved.")
    get.add_argument(
        "-q", "--quiet", action="store_true",
        help="Print only the secret's details, without prompts or prefixes.",
    )
    get.add_argument("-j", "--json", action="store_true", help="Print the result as JSON.")

    delete = sub.add_parser(
        "delete",
        help="Deletes secrets permanently from storage. Use with care.",
        epilog=TYPE_NOTE,
    )
    delete.add_argument("secret", nargs="*", help="The names of the secrets to delete.")
    _add_type_argument(delete)
    delete.add_argument(
        "-m", "--multiple", action="store_true",
        help="When no name is given, select several secrets to delete.",
    )

    ls = sub.add_parser("ls", help="Lists all stored secrets of a particular type.", epilog=TYPE_NOTE)
    _add_type_argument(ls)
    ls.add_argument("-j", "--json", action="store_true", help="Print the result as JSON.")

    return parser


def _add_type_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-t", "--type", dest="secret_type",
        choices=[kind.value for kind in SecretKind],
        default=SecretKind.LOGIN.value,
        help="The type of secret.",
    )


def _add_field_argument(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument(
        "-f", "--field",
        choices=[secret_field.value for secret_field in SecretField],
        help=help_text,
    )


def _add_password_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-auto", action="store_true",
        help="Prompt for the password instead of generating one.",
    )
    parser.add_argument(
        "-l", "--len", dest="passlen", type=int,
        help="The length of the password to generate. The default is 16 characters.",
    )


# ── Store access ────────────────────────────────────────────────────


def create_store(path: Path, console: Console) -> EncryptedStore:
    master = prompt(
        "Enter master password (Make sure to remember it)",
        require_confirmation=True,
        is_sensitive=True,
        console=console,
    )
    store = EncryptedStore.create(path, master)
    console.info(f"Database created at: {path}")
    return store


def open_store(settings: Settings, console: Console) -> EncryptedStore:
    """Open the configured store, offering to create it when missing."""
    path = settings.db_path
    if not EncryptedStore.exists(path):
        if not confirm("Could not find database file. Do you want to initialise it (y/n)", console):
            raise StoreNotFound(f"Could not find database file at {path}")
        return create_store(path, console)

    master = prompt("Enter master password", is_sensitive=True, console=console)
    return EncryptedStore.open(path, master)


def choose_name(records: RecordOperations, kind: SecretKind, console: Console) -> str:
    names = records.names(kind)
    if not names:
        raise SecretNotFound(EMPTY_KIND_HINT[kind])
    return select_one(f"Enter the {kind.label.lower()} name", names, console)


def choose_names(records: RecordOperations, kind: SecretKind, console: Console) -> List[str]:
    names = records.names(kind)
    if not names:
        raise SecretNotFound(EMPTY_KIND_HINT[kind])
    return select_many(f"Select the {kind.label.lower()}s", names, console)


def _password_length(args: argparse.Namespace, settings: Settings) -> Optional[int]:
    return args.passlen if args.passlen is not None else settings.password_length


# ── Handlers ────────────────────────────────────────────────────────


def cmd_init(args: argparse.Namespace, settings: Settings, console: Console) -> int:
    path = Path(args.path).expanduser() if args.path else settings.db_path
    with create_store(path, console):
        pass
    return 0


def cmd_add(args, store: EncryptedStore, settings: Settings, console: Console) -> int:
    records = RecordOperations(store)
    kind = SecretKind(args.secret_type)

    if args.batch:
        importer = BatchImporter(records, password_length=_password_length(args, settings))
        summary = importer.import_file(args.secret)
        if summary.failures:
            console.error("Got some errors:")
            for failure in summary.failures:
                console.error(failure.message)
            console.error("Use cman add --help for more details")
        console.show_names("Successfully added:", summary.successes)
        return 0

    name = args.secret
    validate_name(kind, name)
    if records.exists(kind, name):
        raise DuplicateName(f"{kind.label} {name} already exists")

    if kind is SecretKind.LOGIN:
        username = prompt("Enter username for the account", console=console)
        if args.no_auto:
            password = prompt("Enter Password", require_confirmation=True, is_sensitive=True, console=console)
        else:
            password = generate_password(_password_length(args, settings))
        secret = LoginCredential(name=name, username=username, password=password)
    else:
        username = prompt(
            "Enter username for the account associated with API Key (if any)", console=console
        )
        description = prompt("Enter a short description for the API key", console=console)
        key = prompt("Enter API Key", console=console)
        secret = ApiKey(name=name, username=username, description=description, key=key)

    records.insert(secret)
    console.info("Added Successfully")
    return 0


def cmd_change(args, store: EncryptedStore, settings: Settings, console: Console) -> int:
    if args.secret == RESERVED_NAME:
        new_master = prompt(
            "Enter new master password (Make sure to remember it)",
            require_confirmation=True,
            is_sensitive=True,
            console=console,
        )
        store.change_key(new_master)
        console.info("Master Password Changed Successfully")
        return 0

    records = RecordOperations(store)
    kind = SecretKind(args.secret_type)
    name = args.secret or choose_name(records, kind, console)
    if not records.exists(kind, name):
        raise SecretNotFound(f"{kind.label} {name} does not exist")

    field = SecretField(args.field) if args.field else DEFAULT_CHANGE_FIELD[kind]
    validate_field(kind, field)

    if field is SecretField.PASSWORD:
        if not confirm("Are you sure you want to change the password (yes/no)", console):
            return 0
        if args.no_auto:
            new_value = prompt("Enter new password", require_confirmation=True, is_sensitive=True, console=console)
        else:
            new_value = generate_password(_password_length(args, settings))
    else:
        questions = {
            SecretField.NAME: f"Enter new name for the {kind.label.lower()}",
            SecretField.USERNAME: "Enter new user name",
            SecretField.DESCRIPTION: "Enter new description for the API key",
            SecretField.KEY: "Enter new API key",
        }
        new_value = prompt(questions[field], console=console)

    records.update_field(kind, name, field, new_value)
    console.info("Changed Successfully")
    return 0


def cmd_get(args, store: EncryptedStore, settings: Settings, console: Console) -> int:
    records = RecordOperations(store)
    kind = SecretKind(args.secret_type)
    name = args.secret or choose_name(records, kind, console)
    secret = records.get(kind, name)

    if args.field:
        console.show_field(secret, SecretField(args.field))
    else:
        console.show_secret(secret)
    return 0


def cmd_delete(args, store: EncryptedStore, settings: Settings, console: Console) -> int:
    records = RecordOperations(store)
    kind = SecretKind(args.secret_type)

    if args.secret:
        names = args.secret
    elif args.multiple:
        names = choose_names(records, kind, console)
    else:
        names = [choose_name(records, kind, console)]

    missing = []
    deleted = []
    for name in names:
        if not records.exists(kind, name):
            missing.append(f"{kind.label} {name} does not exist")
            continue
        if not confirm(f"Are you sure you want to delete {name} (yes/no)", console):
            continue
        records.delete(kind, name)
        deleted.append(name)

    console.show_names("Successfully deleted:", deleted)
    if missing:
        raise SecretNotFound("\n".join(missing))
    return 0


def cmd_ls(args, store: EncryptedStore, settings: Settings, console: Console) -> int:
    records = RecordOperations(store)
    console.show_secrets(records.list_secrets(SecretKind(args.secret_type)))
    return 0


HANDLERS: Dict[str, Callable[..., int]] = {
    "add": cmd_add,
    "change": cmd_change,
    "get": cmd_get,
    "delete": cmd_delete,
    "ls": cmd_ls,
}


def run(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    """
    Parse ``argv`` and run one cman command.

    Returns:
        Process exit status (0 success, 1 reported error, 130 interrupted)
    """
    args = build_parser().parse_args(argv)
    console = Console(
        quiet=getattr(args, "quiet", False),
        json_mode=getattr(args, "json", False),
    )

    try:
        settings = settings or load_settings()
        configure_audit_logger(settings.audit_log_dir)
        log_security_event(
            EventType.SYSTEM_START,
            EventSeverity.INFO,
            "cman starting",
            details={"version": __version__, "command": args.command},
        )

        if args.command == "init":
            return cmd_init(args, settings, console)

        with open_store(settings, console) as store:
            return HANDLERS[args.command](args, store, settings, console)

    except CredmanException as e:
        console.error(str(e))
        return 1
    except KeyboardInterrupt:
        console.error("Interrupted")
        return 130
