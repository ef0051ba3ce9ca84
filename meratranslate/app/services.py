from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from meratranslate.app.notifier import Notifier
from meratranslate.contracts import TranscriptEvent
from meratranslate.history.store import TranslationHistory
from meratranslate.nlp.pipeline import TranslationPipeline
from meratranslate.nlp.translator.base import Translator
from meratranslate.nlp.translator.factory import get_translator
from meratranslate.nlp.translator.phrasebook import PhrasebookTranslator
from meratranslate.speech.platform import PlatformCapabilities, RecognitionSettings, detect_capabilities
from meratranslate.speech.recognizer import SpeechCapture


@dataclass(frozen=True)
class AppServices:
    history: TranslationHistory
    translator: Translator
    pipeline: TranslationPipeline
    capabilities: PlatformCapabilities
    recognition_settings: RecognitionSettings
    notifier: Notifier
    logger: logging.Logger

    def speech_capture(self, on_transcript: Callable[[TranscriptEvent], None]) -> SpeechCapture:
        return SpeechCapture(
            on_transcript=on_transcript,
            notifier=self.notifier,
            capabilities=self.capabilities,
            settings=self.recognition_settings,
            logger=self.logger.getChild("speech"),
        )


def _backend_options(args: Any) -> dict[str, Any]:
    return {
        "model": str(args.model),
        "language": str(args.recognition_language),
        "device": args.device,
        "sr": int(args.sr),
        "channels": int(args.channels),
        "chunk_sec": float(args.chunk_sec),
        "rms_th": float(args.rms_th),
        "silence_chunks": int(args.silence_chunks),
        "min_utter_sec": float(args.min_utter_sec),
        "max_utter_sec": args.max_utter_sec,
        "no_speech_timeout_sec": args.no_speech_timeout_sec,
    }


def build_services(args: Any, *, notifier: Notifier, logger: logging.Logger) -> AppServices:
    history = TranslationHistory(
        delay_sec=max(0.0, float(args.history_delay_sec)),
        logger=logger.getChild("history"),
    )
    translator = get_translator(
        str(args.translator),
        endpoint_url=args.endpoint_url,
        client_id=args.client_id,
        output_format=args.output_format,
        timeout_sec=args.request_timeout_sec,
    )
    pipeline = TranslationPipeline(
        primary=translator,
        fallback=PhrasebookTranslator(),
        history=history,
        logger=logger.getChild("pipeline"),
    )
    return AppServices(
        history=history,
        translator=translator,
        pipeline=pipeline,
        capabilities=detect_capabilities(**_backend_options(args)),
        recognition_settings=RecognitionSettings(language=str(args.recognition_language)),
        notifier=notifier,
        logger=logger,
    )
