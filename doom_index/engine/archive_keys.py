"""Archive object naming.

Images live at ``images/YYYY/MM/DD/DOOM_<YYYYMMDDHHMM>_<fingerprint>_<seed>.webp``
with the metadata JSON beside them under the same base name. The id embeds the
minute and the fingerprint, so two generations never collide within a bucket.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

ARCHIVE_ROOT = "images/"

_DATE_PREFIX = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_ARCHIVE_FILENAME = re.compile(r"^DOOM_\d{12}_[a-z0-9]{8}_[a-z0-9]{12}\.(webp|png)$")


@dataclass(frozen=True)
class DatePrefix:
    year: str
    month: str
    day: str

    @property
    def prefix(self) -> str:
        return f"{ARCHIVE_ROOT}{self.year}/{self.month}/{self.day}/"


def parse_date_prefix(date_string: str) -> DatePrefix:
    """Parse ``YYYY-MM-DD`` (or anything starting with it). Raises ValueError."""
    match = _DATE_PREFIX.match(date_string or "")
    if not match:
        raise ValueError(f"Invalid date format: {date_string!r}. Expected YYYY-MM-DD or ISO timestamp.")
    year, month, day = match.groups()
    return DatePrefix(year, month, day)


def build_archive_id(minute_bucket: str, fingerprint: str, seed: str) -> str:
    minute_digits = re.sub(r"\D", "", minute_bucket)[:12]
    return f"DOOM_{minute_digits}_{fingerprint.lower()}_{seed.lower()}"


def build_archive_filename(minute_bucket: str, fingerprint: str, seed: str, fmt: str = "webp") -> str:
    return f"{build_archive_id(minute_bucket, fingerprint, seed)}.{fmt}"


def build_archive_key(minute_bucket: str, filename: str) -> str:
    return parse_date_prefix(minute_bucket).prefix + filename


def metadata_key_for(image_key: str) -> str:
    base, _, _ = image_key.rpartition(".")
    return f"{base}.json"


def extract_id_from_filename(filename: str) -> str:
    return filename.rsplit("/", 1)[-1].rpartition(".")[0]


def is_valid_archive_filename(filename: str) -> bool:
    return bool(_ARCHIVE_FILENAME.match(filename))


def build_public_path(key: str, base_path: str = "/api/archive/object") -> str:
    return f"{base_path.rstrip('/')}/{key.lstrip('/')}"
