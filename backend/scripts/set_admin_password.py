#!/usr/bin/env python3
"""
Set the shared admin password.

Writes {"hash": "<argon2 hash>"} to adminpassword.json in the data directory.
The API never writes this file; run this script on the server instead.

Usage:
  python scripts/set_admin_password.py [--password P] [--data-dir D]

Without --password the script prompts twice (input is not echoed).
"""

import argparse
import asyncio
import getpass
import sys
from typing import Optional, Sequence

from siteadmin.config import Settings
from siteadmin.resources import ADMIN_CREDENTIAL
from siteadmin.services.auth_service import hash_password
from siteadmin.services.json_store import JsonStore

MIN_LENGTH = 3


def read_password(given: Optional[str]) -> str:
    if given is not None:
        return given
    first = getpass.getpass("Nytt adminlösenord: ")
    second = getpass.getpass("Upprepa lösenordet: ")
    if first != second:
        raise SystemExit("Lösenorden matchar inte")
    return first


async def write_credential(data_dir: str, password: str) -> JsonStore:
    store = JsonStore(data_dir)
    store.ensure_directory()
    await store.write(ADMIN_CREDENTIAL.key, {"hash": hash_password(password)})
    return store


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Sätt adminlösenordet")
    ap.add_argument("--password", help="Nytt lösenord (default: fråga interaktivt)")
    ap.add_argument("--data-dir", help="Datakatalog (default: DATA_DIR eller ./data)")
    args = ap.parse_args(argv)

    password = read_password(args.password)
    if len(password) < MIN_LENGTH:
        raise SystemExit(f"Lösenordet måste vara minst {MIN_LENGTH} tecken")

    data_dir = args.data_dir or Settings().data_dir
    store = asyncio.run(write_credential(data_dir, password))
    print("OK: adminlösenordet sparat")
    print(f"  Fil: {store.path_for(ADMIN_CREDENTIAL.key)}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI use
        sys.stderr.write(f"Fel: {exc}\n")
        raise SystemExit(1)
