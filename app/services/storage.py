"""Blob storage for project documents and engineer profile images.

Files live under ``STORAGE_LOCAL_ROOT`` and are served by the static mount at
``STORAGE_LOCAL_URL_PREFIX``. Services never build keys by hand; they go
through :func:`store_upload` so that the type and size rules for each kind of
upload are applied in one place::

    url, key = store_upload(PROJECT_FILES, f"projects/{project.id}", name, data, mime)
    discard(key)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from threading import Lock

from app.config import settings
from app.errors import ValidationError

logger = logging.getLogger(__name__)


def _split_extensions(raw: str) -> frozenset[str]:
    return frozenset(ext.strip().lower() for ext in raw.split(",") if ext.strip())


@dataclass(frozen=True)
class UploadPolicy:
    label: str
    extensions: frozenset[str]
    max_bytes: int

    @classmethod
    def from_settings(cls, label: str, extensions: str, max_bytes: int) -> UploadPolicy:
        return cls(label=label, extensions=_split_extensions(extensions), max_bytes=max_bytes)

    def check(self, file_name: str, size: int) -> str:
        """Return the lower-cased extension of *file_name* or raise ``ValidationError``."""
        ext = PurePosixPath(file_name or "").suffix.lower()
        if ext not in self.extensions:
            raise ValidationError(f"Invalid {self.label} type. Allowed: {', '.join(sorted(self.extensions))}")
        if size > self.max_bytes:
            raise ValidationError(
                f"{self.label.capitalize()} too large. Maximum size: {self.max_bytes // 1024 // 1024}MB"
            )
        return ext


def project_file_policy() -> UploadPolicy:
    return UploadPolicy.from_settings(
        "file", settings.project_file_allowed_extensions, settings.project_file_max_size_bytes
    )


def profile_image_policy() -> UploadPolicy:
    return UploadPolicy.from_settings(
        "image", settings.profile_image_allowed_extensions, settings.profile_image_max_size_bytes
    )


class LocalBackend:
    """Writes blobs below *root* and hands out URLs under *url_prefix*."""

    def __init__(self, root: str | None = None, url_prefix: str | None = None) -> None:
        self._root = Path(root or settings.storage_local_root).resolve()
        self._url_prefix = (url_prefix or settings.storage_local_url_prefix).rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def _path_for(self, key: str) -> Path:
        dest = (self._root / key).resolve()
        try:
            dest.relative_to(self._root)
        except ValueError:
            raise ValueError(f"Invalid storage key (path traversal): {key}")
        return dest

    def put(self, key: str, data: bytes, content_type: str = "") -> str:
        dest = self._path_for(key)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)
        return self.url(key)

    def get(self, key: str) -> bytes:
        dest = self._path_for(key)
        if not dest.exists():
            raise FileNotFoundError(f"Storage key not found: {key}")
        return dest.read_bytes()

    def delete(self, key: str) -> None:
        dest = self._path_for(key)
        if dest.exists():
            dest.unlink()

    def exists(self, key: str) -> bool:
        return self._path_for(key).exists()

    def url(self, key: str) -> str:
        return f"{self._url_prefix}/{key}"

    def key_for_url(self, url: str | None) -> str | None:
        if not url or not url.startswith(f"{self._url_prefix}/"):
            return None
        return url[len(self._url_prefix) + 1 :].strip() or None


class LazyStorage:
    """Creates the local backend on first use; tests swap it with :meth:`configure`."""

    def __init__(self) -> None:
        self._backend: LocalBackend | None = None
        self._lock = Lock()

    def _get_backend(self) -> LocalBackend:
        if self._backend is None:
            with self._lock:
                if self._backend is None:
                    logger.info("Using local storage backend (root=%s)", settings.storage_local_root)
                    self._backend = LocalBackend()
        return self._backend

    def configure(self, backend: LocalBackend | None) -> None:
        with self._lock:
            self._backend = backend

    def put(self, key: str, data: bytes, content_type: str = "") -> str:
        return self._get_backend().put(key, data, content_type)

    def get(self, key: str) -> bytes:
        return self._get_backend().get(key)

    def delete(self, key: str) -> None:
        self._get_backend().delete(key)

    def exists(self, key: str) -> bool:
        return self._get_backend().exists(key)

    def url(self, key: str) -> str:
        return self._get_backend().url(key)

    def key_for_url(self, url: str | None) -> str | None:
        return self._get_backend().key_for_url(url)


storage = LazyStorage()


def store_upload(
    policy: UploadPolicy,
    folder: str,
    file_name: str,
    content: bytes,
    content_type: str | None = None,
) -> tuple[str, str]:
    """Validate and store an upload under a random name. Returns ``(url, key)``."""
    ext = policy.check(file_name, len(content))
    key = f"{folder.strip('/')}/{uuid.uuid4().hex}{ext}"
    url = storage.put(key, content, content_type or "")
    logger.info("upload_stored key=%s bytes=%s", key, len(content))
    return url, key


def discard(key: str | None) -> None:
    """Best-effort removal used after the owning row is gone or never committed."""
    if not key:
        return
    try:
        storage.delete(key)
    except (OSError, ValueError):
        logger.warning("upload_delete_failed key=%s", key, exc_info=True)
