from __future__ import annotations

import logging
import time

from meratranslate.contracts import TranslationRecord, TranslationRequest, TranslationResult
from meratranslate.history.store import TranslationHistory
from meratranslate.nlp.translator.base import Translator
from meratranslate.nlp.translator.phrasebook import PhrasebookTranslator


class InvalidInputError(ValueError):
    pass


def validate_request(text: str, source_lang: str, target_lang: str) -> None:
    if not text or not text.strip():
        raise InvalidInputError("Text is required for translation")
    if source_lang == target_lang:
        raise InvalidInputError("Source and target languages cannot be the same")


class TranslationPipeline:
    """
    Translate through the primary provider and fall back to the phrasebook on
    any failure. Every call that passes validation produces a history record.
    """

    def __init__(
        self,
        *,
        primary: Translator,
        history: TranslationHistory,
        fallback: Translator | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.primary = primary
        self.fallback = fallback or PhrasebookTranslator()
        self.history = history
        self.logger = logger or logging.getLogger(__name__)

    async def _resolve(self, req: TranslationRequest) -> TranslationResult:
        t0 = time.perf_counter()
        try:
            res = await self.primary.translate(req)
        except Exception as e:
            self.logger.warning(
                "translate_endpoint_failed",
                extra={
                    "provider": self.primary.name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "source_lang": req.source_lang,
                    "target_lang": req.target_lang,
                },
            )
            return await self.fallback.translate(req)
        if not res.translated_text:
            self.logger.warning("translate_empty_result", extra={"provider": res.provider})
            res = TranslationResult(
                source_text=req.text,
                translated_text=req.text,
                provider=res.provider,
                fallback="structural",
            )
        self.logger.info(
            "translate_done",
            extra={
                "provider": res.provider,
                "fallback": res.fallback,
                "chars": len(req.text),
                "ms": round((time.perf_counter() - t0) * 1000.0, 2),
            },
        )
        return res

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationRecord:
        validate_request(text, source_lang, target_lang)
        req = TranslationRequest(text=text, source_lang=source_lang, target_lang=target_lang)
        res = await self._resolve(req)
        return self.history.add(
            source_text=text,
            translated_text=res.translated_text,
            source_lang=source_lang,
            target_lang=target_lang,
        )
