# Credential Store - byte-blob key-value persistence for serialized credentials.
# Created: 2026-10-18

from __future__ import annotations

import logging
import os
import re
import stat
import tempfile
from pathlib import Path
from typing import Protocol

from spotsession.config import get_config_dir
from spotsession.errors import StoreDeleteFailure, StoreError, StorePersistFailure

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class SecureCredentialStore(Protocol):
    """Protocol for secret stores holding opaque byte blobs.

    An absent key is a normal result (``None`` / no-op), never an error.
    Failures of the underlying store raise :class:`StoreError`.
    """

    def get(self, key: str) -> bytes | None:
        """Return the blob stored under *key*, or None."""
        ...

    def set(self, key: str, data: bytes) -> None:
        """Store *data* under *key*, replacing any previous value."""
        ...

    def delete(self, key: str) -> None:
        """Remove *key*; missing keys are ignored."""
        ...


class MemoryCredentialStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, bytes] | None = None):
        self._data: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, data: bytes) -> None:
        self._data[key] = bytes(data)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


def _default_store_dir() -> Path:
    return get_config_dir() / "credentials"


class FileCredentialStore:
    """File-based store at ~/.spotsession/credentials/{key}.

    Files are chmod 0600 (owner-only read/write) and replaced atomically.
    """

    def __init__(self, directory: Path | None = None):
        self._directory = directory

    def _dir(self) -> Path:
        d = self._directory if self._directory is not None else _default_store_dir()
        d.mkdir(parents=True, exist_ok=True)
        os.chmod(d, stat.S_IRWXU)
        return d

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StoreError(f"Invalid credential key: {key!r}")
        return self._dir() / key

    def get(self, key: str) -> bytes | None:
        try:
            path = self._path(key)
            if not path.exists():
                return None
            return path.read_bytes()
        except OSError as e:
            raise StoreError(f"Could not read {key!r}: {e}") from e

    def set(self, key: str, data: bytes) -> None:
        try:
            path = self._path(key)
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{key}.")
            try:
                os.chmod(tmp, stat.S_IRUSR | stat.S_IWUSR)
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorePersistFailure(f"Could not write {key!r}: {e}") from e
        logger.debug("Saved credentials blob %s", key)

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StoreDeleteFailure(f"Could not delete {key!r}: {e}") from e
        logger.debug("Deleted credentials blob %s", key)
