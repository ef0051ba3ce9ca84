from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from meratranslate.contracts import TranscriptEvent, TranslationRecord
from meratranslate.nlp.pipeline import InvalidInputError, TranslationPipeline


class SpeechTranslateBridge:
    """
    Feed final transcripts into the translation pipeline and emit records.
    Used as the on_transcript callback of SpeechCapture.
    """

    def __init__(
        self,
        *,
        pipeline: TranslationPipeline,
        source_lang: str,
        target_lang: str,
        on_record: Callable[[TranslationRecord], None],
        on_error: Optional[Callable[[Exception], None]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.pipeline = pipeline
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.on_record = on_record
        self.on_error = on_error
        self.logger = logger or logging.getLogger(__name__)
        self._pending: set[asyncio.Task[None]] = set()

    def __call__(self, event: TranscriptEvent) -> None:
        if not event.is_final:
            return
        task = asyncio.get_running_loop().create_task(self._translate(event.text))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _translate(self, text: str) -> None:
        try:
            record = await self.pipeline.translate(text, self.source_lang, self.target_lang)
        except InvalidInputError as e:
            self.logger.warning("speech_translate_rejected", extra={"error": str(e)})
            if self.on_error is not None:
                self.on_error(e)
            return
        self.on_record(record)

    async def drain(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending))
