"""
SiteAdmin Backend - JSON File Store
===================================

What:  Reads and writes named JSON documents under DATA_DIR.
How:   Async file I/O with aiofiles, every operation bounded by a timeout.
       Writes go to a sibling temp file that replaces the target in one
       os.replace call, so readers see either the old or the new document.
Who:   Content routes, the admin authenticator and the admin password script.

Consistency model:
    One file per resource, one version per file. Concurrent saves to the same
    key are ordered by a per-key asyncio.Lock and the last one wins; there is
    no merge or conflict detection.

Error mapping:
    missing file              → DocumentNotFoundError
    unreadable / bad JSON     → StoreError("Fel vid hämtning av <key>")
    write failure / timeout   → StoreError("Fel vid sparande av <key>")
"""

import asyncio
import json
import logging
import os
import secrets
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles
import aiofiles.os

from siteadmin.exceptions import DocumentNotFoundError, StoreError
from siteadmin.resources import resource_filenames

logger = logging.getLogger(__name__)


def dump_document(value: Any) -> str:
    """Stable, indented serialization used for every stored document."""
    return json.dumps(value, indent=2, ensure_ascii=False)


class JsonStore:
    """
    Flat-file document store keyed by resource name.

    Args:
        data_dir:    Directory holding the JSON files
        filenames:   Map of key → file name (defaults to the resource table)
        io_timeout:  Seconds allowed for one read or write
    """

    def __init__(
        self,
        data_dir: str,
        filenames: Optional[Dict[str, str]] = None,
        io_timeout: float = 5.0,
    ):
        self.data_dir = Path(data_dir).resolve()
        self.filenames = dict(filenames or resource_filenames())
        self.io_timeout = io_timeout
        self._locks: Dict[str, asyncio.Lock] = {}

    def keys(self) -> List[str]:
        return list(self.filenames)

    def ensure_directory(self) -> None:
        """Create DATA_DIR if needed. Called once at startup."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        try:
            return self.data_dir / self.filenames[key]
        except KeyError:
            raise StoreError(
                message=f"Okänd resurs: {key}",
                context={"key": key},
            )

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    # ── Read ──────────────────────────────────────────────────────────────

    async def _read_text(self, path: Path) -> str:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            return await f.read()

    async def read(self, key: str) -> Any:
        """
        Load and parse one document.

        Returns:
            The parsed JSON value, exactly as stored.

        Raises:
            DocumentNotFoundError: The file does not exist
            StoreError: Unknown key, unreadable file, malformed JSON or timeout
        """
        path = self.path_for(key)
        message = f"Fel vid hämtning av {key}"
        try:
            text = await asyncio.wait_for(self._read_text(path), timeout=self.io_timeout)
        except FileNotFoundError:
            raise DocumentNotFoundError(
                message=message,
                context={"key": key, "path": str(path)},
            )
        except asyncio.TimeoutError:
            raise StoreError(
                message=message,
                context={"key": key, "path": str(path), "error": "timeout"},
            )
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(
                message=message,
                context={"key": key, "path": str(path), "os_error": str(e)},
            )

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise StoreError(
                message=message,
                context={"key": key, "path": str(path), "json_error": str(e)},
            )

    # ── Write ─────────────────────────────────────────────────────────────

    @staticmethod
    def _temp_path(path: Path) -> Path:
        """Sibling temp file, unique per call so two writers never share one."""
        return path.with_name(f".{path.name}.{os.getpid()}.{secrets.token_hex(4)}.tmp")

    async def _write_text(self, path: Path, text: str) -> None:
        tmp_path = self._temp_path(path)
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(text)
            await aiofiles.os.replace(tmp_path, path)
        except BaseException:
            if tmp_path.exists():
                tmp_path.unlink()
            raise

    async def write(self, key: str, value: Any) -> None:
        """
        Replace the whole document stored under key.

        Raises:
            StoreError: Unknown key, value not serializable, write failure or timeout
        """
        path = self.path_for(key)
        message = f"Fel vid sparande av {key}"
        try:
            text = dump_document(value)
        except (TypeError, ValueError) as e:
            raise StoreError(message=message, context={"key": key, "error": str(e)})

        async with self._lock_for(key):
            try:
                await asyncio.wait_for(self._write_text(path, text), timeout=self.io_timeout)
            except asyncio.TimeoutError:
                raise StoreError(
                    message=message,
                    context={"key": key, "path": str(path), "error": "timeout"},
                )
            except OSError as e:
                raise StoreError(
                    message=message,
                    context={"key": key, "path": str(path), "os_error": str(e)},
                )

        logger.info("Saved %s (%d bytes)", key, len(text.encode("utf-8")))
