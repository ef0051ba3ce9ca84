from __future__ import annotations

import httpx
import pytest

from meratranslate.contracts import TranslationRequest, TranslationResult
from meratranslate.history.store import TranslationHistory
from meratranslate.nlp.pipeline import InvalidInputError, TranslationPipeline
from meratranslate.nlp.translator.base import TranslationError, Translator
from meratranslate.nlp.translator.google import GoogleTranslateClient


class FailingTranslator(Translator):
    def __init__(self) -> None:
        self.calls: list[TranslationRequest] = []

    @property
    def name(self) -> str:
        return "failing"

    async def translate(self, req: TranslationRequest) -> TranslationResult:
        self.calls.append(req)
        raise TranslationError("endpoint down")


class EchoTranslator(Translator):
    @property
    def name(self) -> str:
        return "echo"

    async def translate(self, req: TranslationRequest) -> TranslationResult:
        return TranslationResult(
            source_text=req.text,
            translated_text=f"{req.target_lang}:{req.text.strip()}",
            provider=self.name,
        )


def _pipeline(primary: Translator) -> TranslationPipeline:
    return TranslationPipeline(primary=primary, history=TranslationHistory(delay_sec=0))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "text,source,target,expected",
    [
        ("hello", "en", "es", "hola"),
        ("hello", "en", "fr", "bonjour"),
        ("hello", "auto", "de", "hallo"),
        ("Thank you very much", "en", "hi", "बहुत धन्यवाद"),
        ("unknown phrase xyz", "en", "es", "[ES] unknown phrase xyz"),
        ("hello", "fr", "en", "[TRANSLATED] hello"),
    ],
)
async def test_endpoint_failure_uses_phrasebook(text, source, target, expected) -> None:
    primary = FailingTranslator()
    record = await _pipeline(primary).translate(text, source, target)
    assert len(primary.calls) == 1
    assert record.translated_text == expected
    assert record.source_text == text
    assert record.source_lang == source
    assert record.target_lang == target


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
async def test_blank_text_is_rejected_before_any_request(text) -> None:
    primary = FailingTranslator()
    with pytest.raises(InvalidInputError, match="Text is required"):
        await _pipeline(primary).translate(text, "en", "es")
    assert primary.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("lang", ["en", "es", "auto", "zz"])
async def test_same_language_is_rejected(lang) -> None:
    primary = FailingTranslator()
    pipeline = _pipeline(primary)
    with pytest.raises(InvalidInputError, match="cannot be the same"):
        await pipeline.translate("hello", lang, lang)
    assert primary.calls == []
    assert len(pipeline.history) == 0


@pytest.mark.asyncio
async def test_ids_strictly_increase_and_text_is_non_empty() -> None:
    pipeline = _pipeline(EchoTranslator())
    seen: list[int] = []
    for text in ["one", "two", "three"]:
        record = await pipeline.translate(text, "en", "de")
        assert record.translated_text
        assert all(record.id > prev for prev in seen)
        seen.append(record.id)
    await pipeline.history.delete(seen[-1])
    record = await pipeline.translate("four", "en", "de")
    assert record.id > max(seen)


@pytest.mark.asyncio
async def test_primary_success_is_recorded_and_returned_as_copy() -> None:
    pipeline = _pipeline(EchoTranslator())
    record = await pipeline.translate("hello", "en", "ja")
    assert record.translated_text == "ja:hello"
    record.translated_text = "mutated"
    stored = await pipeline.history.get_by_id(record.id)
    assert stored.translated_text == "ja:hello"


@pytest.mark.asyncio
async def test_structural_mismatch_keeps_original_text() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[None, None, "en"])

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        pipeline = _pipeline(GoogleTranslateClient(client=http))
        record = await pipeline.translate("hello", "en", "es")
    assert record.translated_text == "hello"


@pytest.mark.asyncio
async def test_non_2xx_endpoint_falls_back_to_phrasebook() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        pipeline = _pipeline(GoogleTranslateClient(client=http))
        record = await pipeline.translate("good night", "en", "fr")
    assert record.translated_text == "bonne nuit"


class BlankTranslator(EchoTranslator):
    async def translate(self, req: TranslationRequest) -> TranslationResult:
        return TranslationResult(source_text=req.text, translated_text="", provider=self.name)


@pytest.mark.asyncio
async def test_empty_provider_output_keeps_original_text() -> None:
    pipeline = _pipeline(BlankTranslator())
    record = await pipeline.translate("good night", "en", "es")
    assert record.translated_text == "good night"
    assert (await pipeline.history.get_by_id(record.id)).translated_text == "good night"
