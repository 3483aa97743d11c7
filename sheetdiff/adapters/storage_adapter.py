"""
Blob storage adapter for rendered exports.

The object store is an external collaborator consumed through three
operations: put, get and delete by path. BlobStore describes that contract;
LocalBlobStore implements it on the local filesystem so exports can be
saved and downloaded without a cloud bucket.

Example:
    store = LocalBlobStore("/var/lib/sheetdiff")
    stored = store.put("exports/comparison.xlsx", data, XLSX_CONTENT_TYPE)
    data = store.get(stored.path)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from sheetdiff.exceptions.comparison_exceptions import ObjectNotFoundError, StorageError

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class StoredObject:
    """
    Location of an object written to a blob store.

    Attributes:
        path: Path of the object relative to the store root.
        size_bytes: Size of the stored object.
        content_type: MIME type the object was stored with.
    """

    path: str
    size_bytes: int
    content_type: str


class BlobStore(Protocol):
    """Key-value blob store addressed by relative paths."""

    def put(self, path: str, data: bytes, content_type: str) -> StoredObject:
        """Store ``data`` under ``path``, replacing any existing object."""
        ...

    def get(self, path: str) -> bytes:
        """Return the object stored under ``path``."""
        ...

    def delete(self, path: str) -> None:
        """Remove the object stored under ``path``."""
        ...


class LocalBlobStore:
    """
    Blob store backed by a directory on the local filesystem.

    Paths are always interpreted relative to the root directory; paths
    that would resolve outside it are rejected.

    Attributes:
        root: Root directory of the store.
    """

    def __init__(self, root: str | Path) -> None:
        """
        Initialize the LocalBlobStore.

        Args:
            root: Root directory of the store. Created on first write.
        """
        self.root = Path(root).resolve()

    def _resolve(self, path: str, operation: str) -> Path:
        """
        Map a store path to a filesystem path inside the root.

        Args:
            path: Relative store path.
            operation: Operation name used in error messages.

        Returns:
            Absolute filesystem path.

        Raises:
            StorageError: If the path is empty or escapes the root.
        """
        cleaned = path.strip().lstrip("/")
        if not cleaned:
            raise StorageError(path=path, operation=operation, reason="Path is empty")

        target = (self.root / cleaned).resolve()
        if target != self.root and self.root not in target.parents:
            raise StorageError(
                path=path,
                operation=operation,
                reason="Path escapes the storage root",
            )
        return target

    def put(self, path: str, data: bytes, content_type: str = XLSX_CONTENT_TYPE) -> StoredObject:
        """
        Store an object, creating parent directories as needed.

        Args:
            path: Relative store path.
            data: Object contents.
            content_type: MIME type of the contents.

        Returns:
            StoredObject describing the written object.

        Raises:
            StorageError: If the object cannot be written.
        """
        target = self._resolve(path, "put")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StorageError(path=path, operation="put", reason=str(e)) from e

        return StoredObject(
            path=target.relative_to(self.root).as_posix(),
            size_bytes=len(data),
            content_type=content_type,
        )

    def get(self, path: str) -> bytes:
        """
        Read an object.

        Args:
            path: Relative store path.

        Returns:
            Object contents.

        Raises:
            ObjectNotFoundError: If no object exists under the path.
            StorageError: If the object cannot be read.
        """
        target = self._resolve(path, "get")
        if not target.is_file():
            raise ObjectNotFoundError(path)
        try:
            return target.read_bytes()
        except OSError as e:
            raise StorageError(path=path, operation="get", reason=str(e)) from e

    def delete(self, path: str) -> None:
        """
        Delete an object.

        Args:
            path: Relative store path.

        Raises:
            ObjectNotFoundError: If no object exists under the path.
            StorageError: If the object cannot be removed.
        """
        target = self._resolve(path, "delete")
        if not target.is_file():
            raise ObjectNotFoundError(path)
        try:
            target.unlink()
        except OSError as e:
            raise StorageError(path=path, operation="delete", reason=str(e)) from e
