from __future__ import annotations

from types import SimpleNamespace

import pytest

from meratranslate.contracts import TranslationRecord
from meratranslate.history import store as history_store
from meratranslate.history.store import NotFoundError, TranslationHistory, coerce_id


def _seed() -> list[TranslationRecord]:
    return [
        TranslationRecord(3, "hello", "hola", "en", "es", "2024-01-01T00:00:00.000Z"),
        TranslationRecord(7, "yes", "oui", "en", "fr", "2024-01-02T00:00:00.000Z"),
    ]


@pytest.mark.parametrize(
    "value,expected",
    [(7, 7), (7.9, 7), ("7", 7), (" 7abc", 7), ("-2", -2), ("abc", None), ("", None), (None, None), (True, None)],
)
def test_coerce_id(value, expected) -> None:
    assert coerce_id(value) == expected


def test_negative_delay_is_rejected() -> None:
    with pytest.raises(ValueError):
        TranslationHistory(delay_sec=-1)


@pytest.mark.asyncio
async def test_get_all_is_idempotent_and_ordered() -> None:
    history = TranslationHistory(_seed(), delay_sec=0)
    first = await history.get_all()
    second = await history.get_all()
    assert first == second
    assert [r.id for r in first] == [3, 7]


@pytest.mark.asyncio
async def test_accessors_await_the_configured_delay(monkeypatch) -> None:
    delays: list[float] = []

    async def fake_sleep(sec: float) -> None:
        delays.append(sec)

    monkeypatch.setattr(history_store, "asyncio", SimpleNamespace(sleep=fake_sleep))
    history = TranslationHistory(_seed(), delay_sec=0.5)
    await history.get_all()
    await history.get_by_id(3)
    await history.update(3, {"translated_text": "¡hola!"})
    await history.create({"source_text": "a"})
    await history.delete(7)
    assert delays == [0.5] * 5


@pytest.mark.asyncio
async def test_add_continues_after_highest_seeded_id() -> None:
    history = TranslationHistory(_seed(), delay_sec=0)
    rec = history.add(source_text="no", translated_text="nein", source_lang="en", target_lang="de")
    assert rec.id == 8
    assert rec.timestamp.endswith("Z")


@pytest.mark.asyncio
async def test_get_by_id_coerces_and_returns_copy() -> None:
    history = TranslationHistory(_seed(), delay_sec=0)
    rec = await history.get_by_id("7")
    assert rec.translated_text == "oui"
    rec.translated_text = "changed"
    assert (await history.get_by_id(7)).translated_text == "oui"


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", [99, "99", "abc", None])
async def test_missing_ids_raise_not_found(missing) -> None:
    history = TranslationHistory(_seed(), delay_sec=0)
    with pytest.raises(NotFoundError):
        await history.get_by_id(missing)
    with pytest.raises(NotFoundError):
        await history.update(missing, {"translated_text": "x"})
    with pytest.raises(NotFoundError):
        await history.delete(missing)


@pytest.mark.asyncio
async def test_create_assigns_fresh_id_and_ignores_unknown_keys() -> None:
    history = TranslationHistory(_seed(), delay_sec=0)
    rec = await history.create(
        {
            "id": 1,
            "source_text": "please",
            "translated_text": "bitte",
            "source_lang": "en",
            "target_lang": "de",
            "colour": "blue",
        }
    )
    assert rec.id == 8
    assert rec.translated_text == "bitte"
    assert not hasattr(rec, "colour")


@pytest.mark.asyncio
async def test_update_merges_known_fields_but_keeps_id() -> None:
    history = TranslationHistory(_seed(), delay_sec=0)
    rec = await history.update(3, {"translated_text": "¡hola!", "id": 42})
    assert rec.id == 3
    assert rec.translated_text == "¡hola!"
    assert rec.source_text == "hello"


@pytest.mark.asyncio
async def test_delete_removes_and_ids_are_not_reused() -> None:
    history = TranslationHistory(_seed(), delay_sec=0)
    removed = await history.delete(7)
    assert removed.id == 7
    assert [r.id for r in await history.get_all()] == [3]
    rec = history.add(source_text="a", translated_text="b", source_lang="en", target_lang="es")
    assert rec.id == 8


@pytest.mark.asyncio
async def test_delete_returns_a_copy() -> None:
    history = TranslationHistory(_seed(), delay_sec=0)
    stored = history._records[0]
    removed = await history.delete(stored.id)
    assert removed == stored
    assert removed is not stored
