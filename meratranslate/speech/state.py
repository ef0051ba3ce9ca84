from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CaptureState(str, Enum):
    UNSUPPORTED = "unsupported"
    IDLE = "idle"
    REQUESTING_PERMISSION = "requesting_permission"
    LISTENING = "listening"
    ERROR = "error"


class RecognitionErrorKind(str, Enum):
    PERMISSION_DENIED = "not-allowed"
    NO_SPEECH = "no-speech"
    AUDIO_CAPTURE = "audio-capture"
    NETWORK = "network"
    SERVICE_NOT_ALLOWED = "service-not-allowed"
    ABORTED = "aborted"
    OTHER = "other"

    @classmethod
    def from_code(cls, code: str) -> "RecognitionErrorKind":
        try:
            return cls(code)
        except ValueError:
            return cls.OTHER


@dataclass
class CaptureStateTracker:
    state: CaptureState = CaptureState.IDLE
    error_kind: RecognitionErrorKind | None = None
    last_error: str | None = None

    @property
    def is_listening(self) -> bool:
        return self.state == CaptureState.LISTENING

    def set_unsupported(self, detail: str) -> None:
        self.state = CaptureState.UNSUPPORTED
        self.last_error = detail

    def set_idle(self) -> None:
        if self.state != CaptureState.UNSUPPORTED:
            self.state = CaptureState.IDLE

    def set_requesting_permission(self) -> None:
        self.state = CaptureState.REQUESTING_PERMISSION

    def set_listening(self) -> None:
        self.state = CaptureState.LISTENING
        self.error_kind = None
        self.last_error = None

    def set_error(self, kind: RecognitionErrorKind, detail: str | None = None) -> None:
        self.state = CaptureState.ERROR
        self.error_kind = kind
        self.last_error = detail or kind.value
