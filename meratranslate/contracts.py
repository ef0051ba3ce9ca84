from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence


class PermissionState(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
    PROMPT = "prompt"


@dataclass(frozen=True)
class TranscriptEvent:
    text: str
    is_final: bool = True  # interim text is never surfaced


@dataclass(frozen=True)
class TranslationRequest:
    text: str
    source_lang: str = "auto"
    target_lang: str = "es"


@dataclass(frozen=True)
class TranslationResult:
    source_text: str
    translated_text: str
    provider: str
    # None on the clean primary path, "structural" or "endpoint" otherwise
    fallback: Optional[str] = None


@dataclass
class TranslationRecord:
    id: int
    source_text: str
    translated_text: str
    source_lang: str
    target_lang: str
    timestamp: str  # ISO-8601, UTC


@dataclass(frozen=True)
class RecognitionAlternative:
    transcript: str
    confidence: float = 1.0


@dataclass(frozen=True)
class RecognitionResult:
    alternatives: Sequence[RecognitionAlternative]
    is_final: bool = False


@dataclass(frozen=True)
class RecognitionResultEvent:
    """
    One platform result delivery. Only results from result_index onward are new;
    earlier entries were already handled by a previous delivery.
    """
    results: Sequence[RecognitionResult] = field(default_factory=tuple)
    result_index: int = 0


@dataclass(frozen=True)
class AudioChunk:
    """
    Raw PCM16 audio chunk captured from a live source (e.g., microphone).
    pcm16: little-endian signed 16-bit PCM bytes (interleaved if channels > 1).
    """
    pcm16: bytes
    sample_rate: int
    channels: int
    start_time: float  # seconds since stream start
    duration: float    # seconds
