"""
Session store adapters.

Every adapter implements the ``get_item``/``set_item``/``remove_item``
capability set of ``supabase_auth.AsyncSupportedStorage`` so it can be
handed straight to the Supabase client options. The auth core never
depends on a concrete adapter.

- FileStorage: plain JSON file, the persistent general-purpose store.
- EncryptedFileStorage: Fernet-encrypted values for secrets at rest.
- SplitStorage: routes sensitive keys to a secure store and the rest to a
  general store. Failures are logged and swallowed.
"""

import asyncio
import json
import logging
import os
import threading
from pathlib import Path
from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken
from supabase_auth import AsyncMemoryStorage, AsyncSupportedStorage

from shared.config import Settings
from shared.exceptions import ConfigurationError

from .exceptions import SessionStorageError

logger = logging.getLogger(__name__)

_SENSITIVE_KEY_MARKERS = ("token", "auth")


def is_sensitive_key(key: str) -> bool:
    """
    Whether a storage key holds secret material.

    Classification is by substring, case-insensitive. The Supabase client
    stores its session under a key ending in ``-auth-token``.
    """
    lowered = key.lower()
    return any(marker in lowered for marker in _SENSITIVE_KEY_MARKERS)


class FileStorage(AsyncSupportedStorage):
    """Persistent key-value store backed by a single JSON file."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        with self._path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise SessionStorageError(f"Corrupt session store: {self._path}")
        return data

    def _write(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp, self._path)

    def _encode(self, value: str) -> str:
        return value

    def _decode(self, value: str) -> str:
        return value

    def _load(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def _store(self, key: str, encoded: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = encoded
            self._write(data)

    def _delete(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if data.pop(key, None) is not None:
                self._write(data)

    # File access runs in a worker thread so the event loop never blocks on disk

    async def get_item(self, key: str) -> Optional[str]:
        value = await asyncio.to_thread(self._load, key)
        if value is None:
            return None
        return self._decode(value)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._store, key, self._encode(value))

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)


class EncryptedFileStorage(FileStorage):
    """
    FileStorage whose values are encrypted with Fernet.

    The file is written with owner-only permissions.
    """

    def __init__(self, path: Union[str, Path], encryption_key: Union[str, bytes]) -> None:
        super().__init__(path)
        key = encryption_key.encode("utf-8") if isinstance(encryption_key, str) else encryption_key
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(
                f"Invalid session encryption key: {e}",
                code="INVALID_ENCRYPTION_KEY",
            ) from e

    def _write(self, data: dict[str, str]) -> None:
        super()._write(data)
        os.chmod(self._path, 0o600)

    def _encode(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def _decode(self, value: str) -> str:
        try:
            return self._fernet.decrypt(value.encode("ascii")).decode("utf-8")
        except InvalidToken as e:
            raise SessionStorageError(
                "Decryption failed: wrong key or tampered data"
            ) from e

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode("ascii")


class SplitStorage(AsyncSupportedStorage):
    """
    Routes keys between a secure store and a general store.

    Keys classified by ``is_sensitive_key`` go to ``secure``; everything
    else goes to ``general``. A failing backend never propagates: reads
    return None and writes become no-ops, both logged.
    """

    def __init__(self, secure: AsyncSupportedStorage, general: AsyncSupportedStorage) -> None:
        self._secure = secure
        self._general = general

    def _target(self, key: str) -> AsyncSupportedStorage:
        return self._secure if is_sensitive_key(key) else self._general

    async def get_item(self, key: str) -> Optional[str]:
        try:
            return await self._target(key).get_item(key)
        except (OSError, ValueError, SessionStorageError) as e:
            logger.error("Storage get_item error for %s: %s", key, e)
            return None

    async def set_item(self, key: str, value: str) -> None:
        try:
            await self._target(key).set_item(key, value)
        except (OSError, ValueError, SessionStorageError) as e:
            logger.error("Storage set_item error for %s: %s", key, e)

    async def remove_item(self, key: str) -> None:
        try:
            await self._target(key).remove_item(key)
        except (OSError, ValueError, SessionStorageError) as e:
            logger.error("Storage remove_item error for %s: %s", key, e)


def create_session_storage(platform: str, settings: Settings) -> AsyncSupportedStorage:
    """
    Build the session store for a client platform.

    Args:
        platform: ``web`` (plain file), ``mobile`` (encrypted secrets plus a
            plain file) or ``memory`` (nothing persisted)
        settings: Application settings with storage paths and the key

    Raises:
        ConfigurationError: ``mobile`` without a session encryption key
        ValueError: Unknown platform
    """
    if platform == "web":
        return FileStorage(settings.session_storage_path)

    if platform == "mobile":
        if not settings.session_encryption_key:
            raise ConfigurationError(
                "SESSION_ENCRYPTION_KEY must be set for encrypted session storage",
                code="MISSING_ENCRYPTION_KEY",
            )
        return SplitStorage(
            secure=EncryptedFileStorage(
                settings.session_secure_storage_path,
                settings.session_encryption_key,
            ),
            general=FileStorage(settings.session_storage_path),
        )

    if platform == "memory":
        return AsyncMemoryStorage()

    raise ValueError(f"Unknown storage platform: {platform}")
