from __future__ import annotations

import asyncio
import dataclasses
import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from meratranslate.contracts import TranslationRecord

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_EDITABLE_FIELDS: tuple[str, ...] = (
    "source_text",
    "translated_text",
    "source_lang",
    "target_lang",
    "timestamp",
)


class NotFoundError(LookupError):
    pass


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def coerce_id(value: Any) -> int | None:
    """Lenient integer parse: 7, 7.9, "7", " 7abc" -> 7; anything else -> None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    m = _LEADING_INT.match(str(value))
    if m is None:
        return None
    return int(m.group(1))


def _known_only(data: Mapping[str, Any]) -> dict[str, Any]:
    return {key: data[key] for key in _EDITABLE_FIELDS if key in data}


class TranslationHistory:
    """
    In-memory, insertion-ordered collection of translation records.

    Ids come from a counter that never moves backwards, so an id is never
    reused even after the record holding it is deleted. Every accessor hands
    out copies; callers cannot mutate stored records.
    """

    def __init__(
        self,
        records: Iterable[TranslationRecord] = (),
        *,
        delay_sec: float = 0.5,
        logger: logging.Logger | None = None,
    ) -> None:
        if delay_sec < 0:
            raise ValueError("delay_sec must be >= 0")
        self._records: list[TranslationRecord] = [dataclasses.replace(r) for r in records]
        self._last_id = max((r.id for r in self._records), default=0)
        self.delay_sec = float(delay_sec)
        self.logger = logger or logging.getLogger(__name__)

    def __len__(self) -> int:
        return len(self._records)

    def _next_id(self) -> int:
        self._last_id += 1
        return self._last_id

    async def _delay(self) -> None:
        await asyncio.sleep(self.delay_sec)

    def _index_of(self, record_id: Any) -> int:
        wanted = coerce_id(record_id)
        if wanted is not None:
            for i, rec in enumerate(self._records):
                if rec.id == wanted:
                    return i
        raise NotFoundError("Translation not found")

    def add(
        self,
        *,
        source_text: str,
        translated_text: str,
        source_lang: str,
        target_lang: str,
        timestamp: str | None = None,
    ) -> TranslationRecord:
        record = TranslationRecord(
            id=self._next_id(),
            source_text=source_text,
            translated_text=translated_text,
            source_lang=source_lang,
            target_lang=target_lang,
            timestamp=timestamp or utc_timestamp(),
        )
        self._records.append(record)
        self.logger.info(
            "history_add",
            extra={"record_id": record.id, "source_lang": source_lang, "target_lang": target_lang},
        )
        return dataclasses.replace(record)

    async def get_all(self) -> list[TranslationRecord]:
        await self._delay()
        return [dataclasses.replace(r) for r in self._records]

    async def get_by_id(self, record_id: Any) -> TranslationRecord:
        await self._delay()
        return dataclasses.replace(self._records[self._index_of(record_id)])

    async def create(self, data: Mapping[str, Any]) -> TranslationRecord:
        await self._delay()
        fields = _known_only(data)
        return self.add(
            source_text=str(fields.get("source_text", "")),
            translated_text=str(fields.get("translated_text", "")),
            source_lang=str(fields.get("source_lang", "")),
            target_lang=str(fields.get("target_lang", "")),
            timestamp=fields.get("timestamp"),
        )

    async def update(self, record_id: Any, data: Mapping[str, Any]) -> TranslationRecord:
        await self._delay()
        idx = self._index_of(record_id)
        self._records[idx] = dataclasses.replace(self._records[idx], **_known_only(data))
        self.logger.info("history_update", extra={"record_id": self._records[idx].id})
        return dataclasses.replace(self._records[idx])

    async def delete(self, record_id: Any) -> TranslationRecord:
        await self._delay()
        idx = self._index_of(record_id)
        removed = self._records.pop(idx)
        self.logger.info("history_delete", extra={"record_id": removed.id})
        return dataclasses.replace(removed)
