"""JSON Collection File — one collection persisted as a JSON array in one file.

Invariants:
    - An absent file reads as an empty collection
    - Every write replaces the complete file (temp sibling + atomic rename);
      readers never observe a half-written collection
    - Blocking file IO runs in a worker thread; the event loop never waits on disk
    - OSError / malformed JSON are wrapped in InternalError with the operation name
      and, when the caller names one, the entity id

Design Decisions:
    - lock serializes read-modify-write for this collection inside one process.
      Separate processes sharing the file still race (known limitation: no file
      locking, no version token)
"""

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from airsoft_shop.core.errors import InternalError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JsonCollectionFile:
    """Whole-file reads and rewrites of a JSON array of records."""

    def __init__(self, path: str | Path, entity_type: str):
        self.path = Path(path)
        self.entity_type = entity_type
        self.lock = asyncio.Lock()

    async def read_all(self, entity_id: str | None = None) -> list[dict]:
        try:
            return await asyncio.to_thread(self._read_sync)
        except (OSError, ValueError) as e:
            logger.error(
                f"Failed reading {self.path}: {e}",
                extra={"operation": "read", "path": str(self.path), "entity_id": entity_id},
            )
            raise InternalError(str(e), f"read {self.entity_type}", entity_id) from e

    async def write_all(
        self, records: list[dict], entity_id: str | None = None,
    ) -> None:
        try:
            await asyncio.to_thread(self._write_sync, records)
        except (OSError, TypeError, ValueError) as e:
            logger.error(
                f"Failed writing {self.path}: {e}",
                extra={"operation": "write", "path": str(self.path), "entity_id": entity_id},
            )
            raise InternalError(str(e), f"write {self.entity_type}", entity_id) from e

    async def mutate(
        self,
        change: Callable[[list[dict]], tuple[T, bool]],
        entity_id: str | None = None,
    ) -> T:
        """Read, apply change, and rewrite when change reports a modification.

        change receives the full record list and returns (result, modified).
        entity_id names the record being changed in any InternalError raised.
        """
        async with self.lock:
            records = await self.read_all(entity_id)
            result, modified = change(records)
            if modified:
                await self.write_all(records, entity_id)
            return result

    def _read_sync(self) -> list[dict]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        if not raw.strip():
            return []
        data: Any = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"{self.path.name} must contain a JSON array")
        return data

    def _write_sync(self, records: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, ensure_ascii=False, indent=2, allow_nan=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
