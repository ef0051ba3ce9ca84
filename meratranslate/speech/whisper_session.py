from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from typing import Any, Callable, Optional

from meratranslate.asr.faster_whisper_pcm16 import FasterWhisperPCM16Transcriber, whisper_language
from meratranslate.audio.mic import MicError, SoundDeviceMicSource
from meratranslate.contracts import RecognitionAlternative, RecognitionResult, RecognitionResultEvent
from meratranslate.live.utterance import EnergyVAD, UtteranceCapture
from meratranslate.speech.platform import SESSION_EVENTS, RecognitionSettings

logger = logging.getLogger(__name__)


def build_mic_source(options: dict[str, Any]) -> SoundDeviceMicSource:
    return SoundDeviceMicSource(
        chunk_seconds=float(options.get("chunk_sec", 0.5)),
        sample_rate=int(options.get("sr", 16000)),
        channels=int(options.get("channels", 1)),
        device=options.get("device"),
    )


class WhisperRecognitionSession:
    """
    Recognition session backed by the microphone, an energy gate and
    faster-whisper. Capture and transcription run on a daemon thread; handlers
    are invoked on the event loop that was running when start() was called.
    """

    def __init__(
        self,
        *,
        mic: SoundDeviceMicSource,
        transcriber: FasterWhisperPCM16Transcriber,
        capture: UtteranceCapture,
    ) -> None:
        self.mic = mic
        self.transcriber = transcriber
        self.capture = capture
        self.settings = RecognitionSettings()
        self._handlers: dict[str, list[Callable[..., None]]] = {e: [] for e in SESSION_EVENTS}
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @classmethod
    def from_options(cls, **options: Any) -> "WhisperRecognitionSession":
        return cls(
            mic=build_mic_source(options),
            transcriber=FasterWhisperPCM16Transcriber(
                model_size=str(options.get("model", "tiny")),
                language=options.get("language", "en-US"),
            ),
            capture=UtteranceCapture(
                vad=EnergyVAD(rms_threshold=float(options.get("rms_th", 250.0))),
                silence_chunks_to_finalize=int(options.get("silence_chunks", 2)),
                min_utter_sec=float(options.get("min_utter_sec", 0.3)),
                max_utter_sec=options.get("max_utter_sec", 8.0),
                no_speech_timeout_sec=options.get("no_speech_timeout_sec", 5.0),
            ),
        )

    def configure(self, settings: RecognitionSettings) -> None:
        self.settings = settings
        self.transcriber.language = whisper_language(settings.language)

    def subscribe(self, event: str, handler: Callable[..., None]) -> None:
        if event not in self._handlers:
            raise ValueError(f"Unknown recognition event: {event}")
        self._handlers[event].append(handler)

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("recognition session already started")
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None
        self._thread = threading.Thread(
            target=self._run,
            name="meratranslate-recognition",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _emit(self, event: str, *args: Any) -> None:
        def _deliver() -> None:
            for handler in list(self._handlers[event]):
                handler(*args)

        if self._loop is None:
            _deliver()
            return
        try:
            self._loop.call_soon_threadsafe(_deliver)
        except RuntimeError:
            # Loop closed.
            logger.info("recognition_event_dropped", extra={"event": event})

    def _emit_final(self, text: str) -> None:
        result = RecognitionResult(alternatives=(RecognitionAlternative(transcript=text),), is_final=True)
        self._emit("result", RecognitionResultEvent(results=(result,), result_index=0))

    def _run(self) -> None:
        self._emit("start")
        try:
            with contextlib.closing(self.mic.chunks(self._stop)) as chunks:
                while True:
                    outcome = self.capture.capture(chunks, self._stop)
                    if outcome is None:
                        if not self._stop.is_set():
                            self._emit("error", "no-speech")
                        break
                    texts = self.transcriber.transcribe_utterance(
                        outcome.pcm16,
                        sample_rate=outcome.sample_rate,
                        channels=outcome.channels,
                    )
                    logger.info(
                        "utterance_transcribed",
                        extra={
                            "reason": outcome.reason,
                            "dur": round(outcome.duration, 2),
                            "segments": len(texts),
                        },
                    )
                    text = " ".join(texts).strip()
                    if text:
                        self._emit_final(text)
                    if not self.settings.continuous or self._stop.is_set():
                        break
        except MicError as e:
            logger.error("recognition_mic_error", extra={"error": str(e)})
            self._emit("error", "audio-capture")
        except Exception:
            logger.exception("recognition_worker_crash")
            self._emit("error", "other")
        finally:
            self._emit("end")
