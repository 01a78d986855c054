"""
SiteAdmin Backend - Admin Authenticator
=======================================

What:  Checks the shared admin password against the stored salted hash.
How:   Loads {"hash": ...} from the "admin" document and verifies in a worker
       thread (hash verification is CPU bound).

Hash formats:
    $argon2id$...        argon2-cffi, written by scripts/set_admin_password.py
    $2a$ / $2b$ / $2y$   bcrypt, written by earlier deployments

Outcomes:
    match                              → True
    mismatch, missing document,
    missing/empty/unknown hash         → False (indistinguishable)
    any other store failure            → StoreError("Internt serverfel")
"""

import logging
from typing import Any

import bcrypt
from argon2 import PasswordHasher
from argon2 import exceptions as argon_exc
from starlette.concurrency import run_in_threadpool

from siteadmin.exceptions import DocumentNotFoundError, StoreError
from siteadmin.resources import ADMIN_CREDENTIAL
from siteadmin.services.json_store import JsonStore

logger = logging.getLogger(__name__)

_ph = PasswordHasher()
_ARGON2_PREFIX = "$argon2"
_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str) -> str:
    """Create a new argon2 hash for the admin credential file."""
    return _ph.hash(password)


def verify_password(password: str, stored_hash: str) -> bool:
    """Constant-time comparison of a password against an argon2 or bcrypt hash."""
    if stored_hash.startswith(_ARGON2_PREFIX):
        try:
            return _ph.verify(stored_hash, password)
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            return False
    if stored_hash.startswith(_BCRYPT_PREFIXES):
        # bcrypt only looks at the first 72 bytes
        try:
            return bcrypt.checkpw(password.encode("utf-8")[:72], stored_hash.encode("utf-8"))
        except ValueError:
            return False
    return False


def _stored_hash(record: Any) -> str:
    if isinstance(record, dict) and isinstance(record.get("hash"), str):
        return record["hash"]
    return ""


class AuthService:
    """Verifies the admin password held in the JSON store."""

    def __init__(self, store: JsonStore):
        self.store = store

    async def verify(self, password: str) -> bool:
        try:
            record = await self.store.read(ADMIN_CREDENTIAL.key)
        except DocumentNotFoundError:
            logger.warning("Admin login attempted but no credential file exists")
            return False
        except StoreError as e:
            logger.error("Could not load admin credential: %s | Context: %s", e.message, e.context)
            raise StoreError(message="Internt serverfel", context=e.context)

        stored = _stored_hash(record)
        if not stored:
            logger.warning("Admin credential file has no usable hash")
            return False

        return await run_in_threadpool(verify_password, password, stored)
