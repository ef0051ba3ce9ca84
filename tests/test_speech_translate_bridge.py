from __future__ import annotations

import pytest

from meratranslate.contracts import TranscriptEvent
from meratranslate.history.store import TranslationHistory
from meratranslate.live.speech_translate import SpeechTranslateBridge
from meratranslate.nlp.pipeline import InvalidInputError, TranslationPipeline
from meratranslate.nlp.translator.phrasebook import PhrasebookTranslator


def _pipeline() -> TranslationPipeline:
    return TranslationPipeline(primary=PhrasebookTranslator(), history=TranslationHistory(delay_sec=0))


@pytest.mark.asyncio
async def test_bridge_translates_final_transcripts_in_order() -> None:
    records = []
    bridge = SpeechTranslateBridge(
        pipeline=_pipeline(),
        source_lang="en",
        target_lang="es",
        on_record=records.append,
    )
    bridge(TranscriptEvent(text="hello"))
    bridge(TranscriptEvent(text="see you later"))
    await bridge.drain()

    assert [(r.source_text, r.translated_text) for r in records] == [
        ("hello", "hola"),
        ("see you later", "hasta luego"),
    ]


@pytest.mark.asyncio
async def test_bridge_ignores_interim_events() -> None:
    records = []
    bridge = SpeechTranslateBridge(pipeline=_pipeline(), source_lang="en", target_lang="es", on_record=records.append)
    bridge(TranscriptEvent(text="hel", is_final=False))
    await bridge.drain()
    assert records == []


@pytest.mark.asyncio
async def test_bridge_reports_rejected_input() -> None:
    errors = []
    bridge = SpeechTranslateBridge(
        pipeline=_pipeline(),
        source_lang="en",
        target_lang="en",
        on_record=lambda r: pytest.fail("no record expected"),
        on_error=errors.append,
    )
    bridge(TranscriptEvent(text="hello"))
    await bridge.drain()
    assert len(errors) == 1
    assert isinstance(errors[0], InvalidInputError)
