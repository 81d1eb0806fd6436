"""Stable serialization and fingerprints.

``compute_stable_hash`` is the idempotency key of the whole system: equal
rounded maps give equal fingerprints regardless of key insertion order. It is
a change detector (FNV-1a, 32 bit), not a security primitive.
"""

from __future__ import annotations

import hashlib
import json
import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from doom_index.engine.quantize import quantize01

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
_MASK32 = 0xFFFFFFFF

PARAMS_QUANTIZE_BUCKETS = 1000


def _format_number(value: float) -> str:
    """Number text as JavaScript prints it (``0.00001``, ``1e-7``, ``1e+21``)."""
    if not math.isfinite(value):
        return "null"
    if value == 0:
        return "0"
    magnitude = abs(value)
    if float(value).is_integer() and magnitude < 1e21:
        return str(int(value))
    text = repr(float(value))
    if 1e-6 <= magnitude < 1e21:
        return format(Decimal(text), "f")
    mantissa, _, exponent = text.partition("e")
    power = int(exponent)
    return f"{mantissa}e{'+' if power >= 0 else '-'}{abs(power)}"


def stable_stringify(value: Any) -> str:
    """Canonical JSON text: object keys sorted at every level, lists kept in order."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Mapping):
        items = sorted(((str(k), v) for k, v in value.items()), key=lambda kv: kv[0])
        return "{" + ",".join(f"{json.dumps(k, ensure_ascii=False)}:{stable_stringify(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(stable_stringify(v) for v in value) + "]"
    if hasattr(value, "as_dict"):
        return stable_stringify(value.as_dict())
    return json.dumps(str(value), ensure_ascii=False)


def fnv1a32(text: str) -> int:
    """FNV-1a over UTF-16 code units (surrogate pairs hashed as two units)."""
    h = FNV_OFFSET_BASIS
    data = text.encode("utf-16-le", errors="surrogatepass")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h ^ unit) * FNV_PRIME) & _MASK32
    return h


def compute_stable_hash(value: Any) -> str:
    """8-hex-character fingerprint of ``value``."""
    return f"{fnv1a32(stable_stringify(value)):08x}"


def sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def hash_visual_params(params: Any, buckets: int = PARAMS_QUANTIZE_BUCKETS) -> str:
    """Short hash of visual params, quantized so float noise does not leak in."""
    values = params.as_dict() if hasattr(params, "as_dict") else dict(params)
    serialized = "|".join(f"{key}:{quantize01(values[key], buckets):.3f}" for key in sorted(values))
    return sha256_hex(serialized)[:8]


def seed_for_minute(minute_bucket: str, params_hash: str) -> str:
    """Deterministic 12-hex seed for one minute bucket and parameter set."""
    return sha256_hex(f"{minute_bucket}|{params_hash.lower()}")[:12]
