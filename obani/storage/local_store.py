"""
Local Durable Storage
Small key/value abstraction over plain JSON text, one file per key.
The session and the filter presets are its only tenants.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

AUTH_KEY = 'obani_auth'
PRESETS_KEY = 'obani_filter_presets'


class KeyValueStore:
    """
    Interface for string key/value persistence.
    Values are opaque text (callers store JSON). A missing key reads as None.
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Process-local store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """
    Stores each key as <directory>/<key>.json.

    The directory is created on first write, not on construction, so read-only
    commands leave the filesystem untouched.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        """Unreadable files (bad encoding, permissions) read as missing."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable stored key '{key}' at {path}: {type(e).__name__}: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        # Write-then-rename so a crash never leaves half a session file behind
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                fh.write(value)
            os.replace(tmp, path)
        except Exception:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        logger.debug(f"Stored key '{key}' ({len(value)} bytes) at {path}")

    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()
            logger.debug(f"Removed key '{key}' from {self.directory}")
