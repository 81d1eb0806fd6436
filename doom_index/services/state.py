"""State service — global generation state, per-token display state, revenue.

Layout in the object store:
    state/global.json
    state/<TICKER>.json
    revenue/<minute bucket>.json
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from pydantic import ValidationError as PydanticValidationError

from doom_index.models.domain import GlobalState, RevenueReport, TokenState
from doom_index.models.errors import StorageError
from doom_index.models.result import Err, Ok, Result
from doom_index.storage.objects import ObjectStore, get_json, put_json

logger = logging.getLogger(__name__)

GLOBAL_STATE_KEY = "state/global.json"

# Sentinel: no compare-and-swap requested
UNSET = object()


def token_state_key(ticker: str) -> str:
    return f"state/{ticker}.json"


def revenue_key(minute_bucket: str) -> str:
    return f"revenue/{minute_bucket.replace(':', '-')}.json"


class StateService:
    def __init__(self, store: ObjectStore) -> None:
        self.store = store
        # Serializes compare-and-swap on the global state within this process
        self._cas_lock = asyncio.Lock()

    async def _read_model(self, key: str, model: type):
        result = await get_json(self.store, key)
        if isinstance(result, Err) or result.value is None:
            return result
        try:
            return Ok(model.model_validate(result.value))
        except PydanticValidationError as e:
            return Err(StorageError("get", key, f"Stored record is invalid: {e.error_count()} errors"))

    async def read_global_state(self) -> Result[GlobalState | None]:
        return await self._read_model(GLOBAL_STATE_KEY, GlobalState)

    async def write_global_state(self, state: GlobalState, expected_fingerprint=UNSET) -> Result[None]:
        """Write the global state.

        With ``expected_fingerprint`` the write only lands if the stored
        ``prev_fingerprint`` still equals it; otherwise ``StorageError(op="cas")``.
        """
        if expected_fingerprint is UNSET:
            return await put_json(self.store, GLOBAL_STATE_KEY, state.model_dump())

        async with self._cas_lock:
            current = await self.read_global_state()
            if isinstance(current, Err):
                return current
            stored = current.value.prev_fingerprint if current.value else None
            if stored != expected_fingerprint:
                logger.warning("global state CAS mismatch: expected=%s stored=%s", expected_fingerprint, stored)
                return Err(StorageError(
                    "cas",
                    GLOBAL_STATE_KEY,
                    f"prev_fingerprint changed concurrently (expected {expected_fingerprint}, found {stored})",
                ))
            return await put_json(self.store, GLOBAL_STATE_KEY, state.model_dump())

    async def read_token_state(self, ticker: str) -> Result[TokenState | None]:
        return await self._read_model(token_state_key(ticker), TokenState)

    async def write_token_states(self, states: Sequence[TokenState]) -> Result[None]:
        """Write every token state; report the first failure after all writes settle."""
        results = await asyncio.gather(
            *(put_json(self.store, token_state_key(s.ticker), s.model_dump()) for s in states)
        )
        for result in results:
            if isinstance(result, Err):
                return result
        return Ok(None)

    async def write_revenue(self, report: RevenueReport, minute_bucket: str) -> Result[None]:
        return await put_json(self.store, revenue_key(minute_bucket), report.model_dump())

    async def read_revenue(self, minute_bucket: str) -> Result[RevenueReport | None]:
        return await self._read_model(revenue_key(minute_bucket), RevenueReport)
