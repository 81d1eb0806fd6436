"""Archive service — write-once image + metadata storage and paginated listing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from doom_index.engine.archive_keys import (
    ARCHIVE_ROOT,
    build_archive_key,
    build_public_path,
    extract_id_from_filename,
    is_valid_archive_filename,
    metadata_key_for,
    parse_date_prefix,
)
from doom_index.models.domain import ArchiveMetadata, validate_archive_metadata
from doom_index.models.errors import StorageError, ValidationError
from doom_index.models.result import Err, Ok, Result
from doom_index.storage.objects import ObjectStore, get_json, put_json

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_LIST_BATCH = 1000

_CONTENT_TYPES = {"webp": "image/webp", "png": "image/png"}


@dataclass
class StoredArchive:
    image_key: str
    metadata_key: str
    image_url: str
    metadata: ArchiveMetadata


@dataclass
class ArchivePage:
    items: list[ArchiveMetadata] = field(default_factory=list)
    cursor: str | None = None
    has_more: bool = False


class ArchiveService:
    def __init__(self, store: ObjectStore, public_base_path: str = "/api/archive/object") -> None:
        self.store = store
        self.public_base_path = public_base_path

    def public_url(self, key: str) -> str:
        return build_public_path(key, self.public_base_path)

    async def store_image_with_metadata(
        self,
        minute_bucket: str,
        filename: str,
        image: bytes,
        metadata: ArchiveMetadata,
    ) -> Result[StoredArchive]:
        """Store the image, then its metadata. A metadata failure removes the image."""
        if metadata.id != extract_id_from_filename(filename):
            return Err(ValidationError(
                f"Metadata ID ({metadata.id}) does not match filename ({filename})"
            ))
        if not is_valid_archive_filename(filename):
            return Err(ValidationError(f"Invalid archive filename: {filename}"))

        try:
            image_key = build_archive_key(minute_bucket, filename)
        except ValueError as e:
            return Err(ValidationError(str(e)))
        metadata_key = metadata_key_for(image_key)

        existing = await self.store.get(image_key)
        if isinstance(existing, Ok) and existing.value is not None:
            return Err(StorageError("put", image_key, "Archive entry already exists"))

        final = metadata.model_copy(update={
            "image_url": self.public_url(image_key),
            "file_size": len(image),
        })
        checked = validate_archive_metadata(final.model_dump())
        if isinstance(checked, Err):
            return checked

        extension = filename.rpartition(".")[2]
        put_image = await self.store.put(image_key, image, _CONTENT_TYPES.get(extension, "application/octet-stream"))
        if isinstance(put_image, Err):
            return put_image

        put_meta = await put_json(self.store, metadata_key, final.model_dump())
        if isinstance(put_meta, Err):
            rollback = await self.store.delete(image_key)
            if isinstance(rollback, Err):
                logger.error("Failed to roll back image %s: %s", image_key, rollback.error.message)
            return Err(StorageError(
                "put",
                metadata_key,
                f"Metadata save failed after image save: {put_meta.error.message}. Image has been rolled back.",
            ))

        logger.info("Archived %s (%d bytes)", image_key, len(image))
        return Ok(StoredArchive(image_key, metadata_key, final.image_url, final))

    async def get_object(self, key: str):
        return await self.store.get(key)

    async def _load_metadata(self, image_key: str) -> ArchiveMetadata | None:
        metadata_key = metadata_key_for(image_key)
        loaded = await get_json(self.store, metadata_key)
        if isinstance(loaded, Err):
            logger.warning("archive.metadata.load.failed %s: %s", metadata_key, loaded.error.message)
            return None
        if loaded.value is None:
            logger.warning("archive.metadata.missing %s", metadata_key)
            return None
        checked = validate_archive_metadata(loaded.value)
        if isinstance(checked, Err):
            logger.warning("archive.metadata.invalid %s", metadata_key)
            return None
        return checked.value

    async def list_images(
        self,
        limit: int = DEFAULT_LIMIT,
        cursor: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> Result[ArchivePage]:
        """List archived items, newest first.

        ``cursor`` is the key of the last item of the previous page. Dates are
        ``YYYY-MM-DD`` and inclusive.
        """
        limit = min(max(int(limit), 1), MAX_LIMIT)
        try:
            start = parse_date_prefix(start_date).prefix if start_date else None
            end = parse_date_prefix(end_date).prefix if end_date else None
        except ValueError as e:
            return Err(ValidationError(str(e)))

        prefix = start if start and start == end else ARCHIVE_ROOT
        keys: list[str] = []
        after: str | None = None
        while True:
            page = await self.store.list(prefix=prefix, limit=MAX_LIST_BATCH, start_after=after)
            if isinstance(page, Err):
                return page
            for obj in page.value.objects:
                filename = obj.key.rsplit("/", 1)[-1]
                if not is_valid_archive_filename(filename):
                    continue
                # compare on the date directory, "images/YYYY/MM/DD/"
                day = obj.key[: len(ARCHIVE_ROOT) + 11]
                if start and day < start:
                    continue
                if end and day > end:
                    continue
                keys.append(obj.key)
            if not page.value.truncated:
                break
            after = page.value.cursor

        # keys embed the minute, so reverse key order is newest first
        keys.sort(reverse=True)
        if cursor:
            keys = [k for k in keys if k < cursor]

        items: list[ArchiveMetadata] = []
        last_key: str | None = None
        consumed = 0
        for key in keys:
            if len(items) >= limit:
                break
            consumed += 1
            last_key = key
            metadata = await self._load_metadata(key)
            if metadata is None:
                continue
            items.append(metadata.model_copy(update={"image_url": self.public_url(key)}))

        has_more = consumed < len(keys)
        return Ok(ArchivePage(items=items, cursor=last_key if has_more else None, has_more=has_more))
