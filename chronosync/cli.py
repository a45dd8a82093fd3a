from __future__ import annotations

import argparse
import logging
import sys
from getpass import getpass
from pathlib import Path
from typing import List, Optional

from .config import Settings, load_settings
from .errors import DecodeError, StoreError, SyncError
from .logging_setup import setup_logging
from .storage import LocalStore
from .sync import USER_MESSAGE, export_code, import_code

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chronosync",
        description="Move your ChronoSync tasks and tags between devices with an encrypted sync code",
    )
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data directory (default: $CHRONOSYNC_DATA_DIR or ~/.chronosync)")
    parser.add_argument("--log-level", default=None, help="Console log level (default: INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Set the current user")
    p.add_argument("name")
    sub.add_parser("logout", help="Forget the current user")
    sub.add_parser("whoami", help="Print the current user")

    p = sub.add_parser("export", help="Print an encrypted sync code of the current user's data")
    p.add_argument("--password-stdin", action="store_true", help="Read the password from stdin")

    p = sub.add_parser("import", help="Replace local data with the contents of a sync code")
    p.add_argument("code", nargs="?", help="Sync code (read from stdin when omitted)")
    p.add_argument("--password-stdin", action="store_true", help="Read the password from stdin")
    p.add_argument("-y", "--yes", action="store_true", help="Do not ask before overwriting")

    p = sub.add_parser("web", help="Serve export/import over HTTP")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)

    sub.add_parser("gui", help="Open the Secure Sync window")
    return parser


def _read_password(from_stdin: bool, prompt: str) -> str:
    if from_stdin:
        return sys.stdin.readline().rstrip("\r\n")
    return getpass(prompt)


def _cmd_export(store: LocalStore, args: argparse.Namespace) -> int:
    password = _read_password(args.password_stdin, "Encryption password: ")
    if not password:
        print("Please enter a password to encrypt your data.", file=sys.stderr)
        return 1
    try:
        code = export_code(store, password)
    except (StoreError, SyncError) as ex:
        print(f"Could not export data: {ex}", file=sys.stderr)
        return 1
    print(code)
    return 0


def _cmd_import(store: LocalStore, args: argparse.Namespace) -> int:
    code = args.code
    if code is None:
        if args.password_stdin:
            print("Pass the sync code as an argument when reading the password from stdin.", file=sys.stderr)
            return 2
        code = sys.stdin.readline()
    code = code.strip()
    password = _read_password(args.password_stdin, "Decryption password: ")
    if not code or not password:
        print("Please paste your sync code and enter the password.", file=sys.stderr)
        return 1
    if not args.yes:
        answer = input("This will overwrite all current data on this device for the imported user. Continue? [y/N] ")
        if answer.strip().lower() not in {"y", "yes"}:
            print("Import cancelled.", file=sys.stderr)
            return 1
    try:
        snapshot = import_code(store, code, password)
    except DecodeError as ex:
        logger.debug("Import rejected: %s", type(ex).__name__)
        print(USER_MESSAGE, file=sys.stderr)
        return 1
    except (StoreError, SyncError) as ex:
        print(f"Could not import data: {ex}", file=sys.stderr)
        return 1
    print(f"Imported {len(snapshot.tasks)} tasks and {len(snapshot.tags)} tags for {snapshot.owner}.")
    return 0


def _dispatch(settings: Settings, args: argparse.Namespace) -> int:
    store = LocalStore(settings.data_dir)
    if args.command == "login":
        try:
            print(f"Logged in as {store.login(args.name)}")
        except (ValueError, StoreError) as ex:
            print(str(ex), file=sys.stderr)
            return 1
        return 0
    if args.command == "logout":
        store.logout()
        return 0
    if args.command == "whoami":
        try:
            user = store.current_user()
        except StoreError as ex:
            print(str(ex), file=sys.stderr)
            return 1
        if user is None:
            print("Not logged in", file=sys.stderr)
            return 1
        print(user)
        return 0
    if args.command == "export":
        return _cmd_export(store, args)
    if args.command == "import":
        return _cmd_import(store, args)
    if args.command == "web":
        from .webapp import serve  # fastapi and uvicorn only load for this command
        serve(store, args.host or settings.web_host, args.port or settings.web_port)
        return 0
    if args.command == "gui":
        from .ui_tk import run_app
        run_app(store)
        return 0
    return 2


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = load_settings(args.data_dir)
    level = (args.log_level or settings.log_level).upper()
    setup_logging(log_dir=settings.log_dir, console_level=getattr(logging, level, logging.INFO))
    return _dispatch(settings, args)


if __name__ == "__main__":
    sys.exit(main())
