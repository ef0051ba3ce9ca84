from __future__ import annotations

import asyncio
import importlib.util
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from meratranslate.audio.mic import MicError, SoundDeviceMicSource
from meratranslate.contracts import PermissionState

# Session lifecycle events: "start", "result", "error", "end".
SESSION_EVENTS: tuple[str, ...] = ("start", "result", "error", "end")


@dataclass(frozen=True)
class RecognitionSettings:
    continuous: bool = False
    interim_results: bool = True
    language: str = "en-US"
    max_alternatives: int = 1


class RecognitionSession(Protocol):
    def configure(self, settings: RecognitionSettings) -> None:
        ...

    def subscribe(self, event: str, handler: Callable[..., None]) -> None:
        ...

    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...


class PermissionStatus(Protocol):
    @property
    def state(self) -> PermissionState:
        ...

    def subscribe(self, handler: Callable[[PermissionState], None]) -> Callable[[], None]:
        """Register a change handler; returns an unsubscribe callable."""
        ...


class PermissionQuery(Protocol):
    async def query(self) -> PermissionStatus:
        ...


class MediaAccess(Protocol):
    async def request_microphone(self) -> None:
        """Resolve when the microphone is usable, raise when access is refused."""
        ...


@dataclass(frozen=True)
class PlatformCapabilities:
    recognition: Optional[Callable[[], RecognitionSession]] = None
    permissions: Optional[PermissionQuery] = None
    media: Optional[MediaAccess] = None

    @property
    def supports_recognition(self) -> bool:
        return self.recognition is not None


class SoundDeviceMediaAccess:
    def __init__(self, mic: SoundDeviceMicSource) -> None:
        self.mic = mic

    async def request_microphone(self) -> None:
        try:
            await asyncio.to_thread(self.mic.probe)
        except MicError as e:
            raise PermissionError(str(e)) from e


def _module_available(name: str) -> bool:
    return importlib.util.find_spec(name) is not None


def detect_capabilities(**backend_options: Any) -> PlatformCapabilities:
    """
    Probe for a usable desktop recognition stack. Without faster-whisper and
    sounddevice there is no recognition capability at all.
    """
    if not (_module_available("faster_whisper") and _module_available("sounddevice")):
        return PlatformCapabilities()

    from meratranslate.speech.whisper_session import WhisperRecognitionSession

    # Sessions share one mic, model and gate.
    template = WhisperRecognitionSession.from_options(**backend_options)

    def _factory() -> RecognitionSession:
        return WhisperRecognitionSession(
            mic=template.mic,
            transcriber=template.transcriber,
            capture=template.capture,
        )

    return PlatformCapabilities(
        recognition=_factory,
        permissions=None,
        media=SoundDeviceMediaAccess(template.mic),
    )
