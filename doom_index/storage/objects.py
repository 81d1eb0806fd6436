"""Key/value object stores backing state and the image archive.

Keys are ``/``-separated paths (``state/global.json``,
``images/2025/11/14/DOOM_….webp``). Listing is lexicographic by key, which
makes the date-partitioned archive layout sort chronologically.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from doom_index.models.errors import StorageError
from doom_index.models.result import Err, Ok, Result

logger = logging.getLogger(__name__)

_META_SUFFIX = ".meta.json"


@dataclass
class StoredObject:
    key: str
    data: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)

    def json(self) -> Any:
        return json.loads(self.data.decode("utf-8"))


@dataclass
class ObjectInfo:
    key: str
    size: int


@dataclass
class ListPage:
    objects: list[ObjectInfo] = field(default_factory=list)
    truncated: bool = False
    cursor: str | None = None


class ObjectStore(Protocol):
    async def put(self, key: str, data: bytes, content_type: str = ...) -> Result[None]: ...

    async def get(self, key: str) -> Result[StoredObject | None]: ...

    async def list(self, prefix: str = "", limit: int = 1000, start_after: str | None = None) -> Result[ListPage]: ...

    async def delete(self, key: str) -> Result[None]: ...


def _page(keys: list[tuple[str, int]], prefix: str, limit: int, start_after: str | None) -> ListPage:
    selected = sorted(
        (k, size) for k, size in keys
        if k.startswith(prefix) and (start_after is None or k > start_after)
    )
    limit = max(limit, 1)
    window = selected[:limit]
    truncated = len(selected) > limit
    return ListPage(
        objects=[ObjectInfo(k, size) for k, size in window],
        truncated=truncated,
        cursor=window[-1][0] if truncated and window else None,
    )


class MemoryObjectStore:
    """In-process store; used by tests and the ``memory`` storage backend."""

    def __init__(self) -> None:
        self._objects: dict[str, StoredObject] = {}

    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> Result[None]:
        self._objects[key] = StoredObject(key, bytes(data), content_type)
        return Ok(None)

    async def get(self, key: str) -> Result[StoredObject | None]:
        return Ok(self._objects.get(key))

    async def list(self, prefix: str = "", limit: int = 1000, start_after: str | None = None) -> Result[ListPage]:
        keys = [(k, o.size) for k, o in self._objects.items()]
        return Ok(_page(keys, prefix, limit, start_after))

    async def delete(self, key: str) -> Result[None]:
        self._objects.pop(key, None)
        return Ok(None)

    def keys(self) -> list[str]:
        return sorted(self._objects)


class FileObjectStore:
    """Directory-backed store. Object bytes at ``root/<key>``, content type in a sidecar."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Key escapes store root: {key}")
        return path

    def _put_sync(self, key: str, data: bytes, content_type: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_bytes(data)
        tmp.replace(path)
        path.with_name(path.name + _META_SUFFIX).write_text(
            json.dumps({"content_type": content_type}), encoding="utf-8"
        )

    def _get_sync(self, key: str) -> StoredObject | None:
        path = self._path(key)
        if not path.is_file():
            return None
        content_type = "application/octet-stream"
        meta = path.with_name(path.name + _META_SUFFIX)
        if meta.is_file():
            content_type = json.loads(meta.read_text(encoding="utf-8")).get("content_type", content_type)
        return StoredObject(key, path.read_bytes(), content_type)

    def _keys_sync(self, prefix: str, start_after: str | None, limit: int) -> list[tuple[str, int]]:
        """Walk the tree in key order and stop once ``limit + 1`` keys are found."""
        keys: list[tuple[str, int]] = []

        def walk(directory: Path) -> bool:
            entries = []
            for path in directory.iterdir():
                key = path.relative_to(self.root).as_posix()
                entries.append((key + "/" if path.is_dir() else key, path))
            entries.sort()
            for key, path in entries:
                if key.endswith("/"):
                    if not (key.startswith(prefix) or prefix.startswith(key)):
                        continue
                    # every key below sorts before the cursor
                    if start_after is not None and key < start_after and not start_after.startswith(key):
                        continue
                    if walk(path):
                        return True
                    continue
                if key.endswith((_META_SUFFIX, ".tmp")) or not key.startswith(prefix):
                    continue
                if start_after is not None and key <= start_after:
                    continue
                keys.append((key, path.stat().st_size))
                if len(keys) > limit:
                    return True
            return False

        walk(self.root)
        return keys

    def _delete_sync(self, key: str) -> None:
        path = self._path(key)
        path.unlink(missing_ok=True)
        path.with_name(path.name + _META_SUFFIX).unlink(missing_ok=True)

    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> Result[None]:
        try:
            await asyncio.to_thread(self._put_sync, key, data, content_type)
        except (OSError, ValueError) as e:
            return Err(StorageError("put", key, f"File put failed: {e}"))
        return Ok(None)

    async def get(self, key: str) -> Result[StoredObject | None]:
        try:
            return Ok(await asyncio.to_thread(self._get_sync, key))
        except (OSError, ValueError) as e:
            return Err(StorageError("get", key, f"File get failed: {e}"))

    async def list(self, prefix: str = "", limit: int = 1000, start_after: str | None = None) -> Result[ListPage]:
        try:
            keys = await asyncio.to_thread(self._keys_sync, prefix, start_after, max(limit, 1))
        except OSError as e:
            return Err(StorageError("list", prefix, f"File list failed: {e}"))
        return Ok(_page(keys, prefix, limit, start_after))

    async def delete(self, key: str) -> Result[None]:
        try:
            await asyncio.to_thread(self._delete_sync, key)
        except (OSError, ValueError) as e:
            return Err(StorageError("delete", key, f"File delete failed: {e}"))
        return Ok(None)


async def put_json(store: ObjectStore, key: str, data: Any) -> Result[None]:
    try:
        payload = json.dumps(data, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        return Err(StorageError("put", key, f"JSON encode failed: {e}"))
    return await store.put(key, payload, "application/json")


async def get_json(store: ObjectStore, key: str) -> Result[Any | None]:
    result = await store.get(key)
    if isinstance(result, Err):
        return result
    obj = result.value
    if obj is None:
        return Ok(None)
    try:
        return Ok(obj.json())
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Corrupt JSON object at %s: %s", key, e)
        return Err(StorageError("get", key, f"JSON decode failed: {e}"))
