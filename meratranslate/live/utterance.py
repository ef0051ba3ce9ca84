from __future__ import annotations

import math
import threading
from array import array
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from meratranslate.contracts import AudioChunk


def pcm16_rms(pcm16: bytes) -> float:
    """Return RMS energy for little-endian int16 PCM bytes."""
    if len(pcm16) < 2:
        return 0.0
    samples = array("h")
    samples.frombytes(pcm16[: len(pcm16) - (len(pcm16) % 2)])
    sum_sq = 0.0
    for value in samples:
        sum_sq += float(value) * float(value)
    return math.sqrt(sum_sq / len(samples))


class EnergyVAD:
    def __init__(self, rms_threshold: float = 250.0) -> None:
        if rms_threshold < 0:
            raise ValueError("rms_threshold must be >= 0")
        self.rms_threshold = float(rms_threshold)

    def is_speech(self, pcm16: bytes) -> bool:
        return pcm16_rms(pcm16) >= self.rms_threshold


@dataclass(frozen=True)
class UtteranceOutcome:
    pcm16: bytes
    sample_rate: int
    channels: int
    t0: float
    reason: str  # "silence", "max_utter_sec", "stopped", "stream_end"

    @property
    def duration(self) -> float:
        bytes_per_second = self.sample_rate * self.channels * 2
        if bytes_per_second <= 0:
            return 0.0
        return len(self.pcm16) / float(bytes_per_second)


class UtteranceCapture:
    """
    Energy-gated single-utterance capture.

    Reads chunks until speech starts, then keeps them until enough trailing
    silence, the max duration, a stop request, or the end of the stream.
    Returns None if nothing usable was heard before no_speech_timeout_sec.
    """

    def __init__(
        self,
        *,
        vad: EnergyVAD,
        silence_chunks_to_finalize: int = 2,
        min_utter_sec: float = 0.3,
        max_utter_sec: Optional[float] = 8.0,
        no_speech_timeout_sec: Optional[float] = 5.0,
    ) -> None:
        if silence_chunks_to_finalize <= 0:
            raise ValueError("silence_chunks_to_finalize must be > 0")
        if min_utter_sec < 0:
            raise ValueError("min_utter_sec must be >= 0")
        if max_utter_sec is not None and max_utter_sec <= 0:
            raise ValueError("max_utter_sec must be > 0 when set")
        if no_speech_timeout_sec is not None and no_speech_timeout_sec <= 0:
            raise ValueError("no_speech_timeout_sec must be > 0 when set")

        self.vad = vad
        self.silence_chunks_to_finalize = int(silence_chunks_to_finalize)
        self.min_utter_sec = float(min_utter_sec)
        self.max_utter_sec = max_utter_sec
        self.no_speech_timeout_sec = no_speech_timeout_sec

    def _outcome(self, parts: list[bytes], first: AudioChunk, reason: str) -> Optional[UtteranceOutcome]:
        out = UtteranceOutcome(
            pcm16=b"".join(parts),
            sample_rate=int(first.sample_rate),
            channels=int(first.channels),
            t0=float(first.start_time),
            reason=reason,
        )
        if out.duration < self.min_utter_sec:
            return None
        return out

    def capture(
        self,
        chunks: Iterable[AudioChunk],
        stop_event: Optional[threading.Event] = None,
    ) -> Optional[UtteranceOutcome]:
        parts: list[bytes] = []
        first: Optional[AudioChunk] = None
        trailing_silence = 0
        waited = 0.0

        it: Iterator[AudioChunk] = iter(chunks)
        for chunk in it:
            if stop_event is not None and stop_event.is_set():
                return self._outcome(parts, first, "stopped") if first is not None else None

            if self.vad.is_speech(chunk.pcm16):
                if first is None:
                    first = chunk
                parts.append(chunk.pcm16)
                trailing_silence = 0
                if self.max_utter_sec is not None:
                    probe = self._outcome(parts, first, "max_utter_sec")
                    if probe is not None and probe.duration >= self.max_utter_sec:
                        return probe
                continue

            if first is None:
                waited += float(chunk.duration)
                if self.no_speech_timeout_sec is not None and waited >= self.no_speech_timeout_sec:
                    return None
                continue

            parts.append(chunk.pcm16)
            trailing_silence += 1
            if trailing_silence >= self.silence_chunks_to_finalize:
                return self._outcome(parts, first, "silence")

        if first is None:
            return None
        return self._outcome(parts, first, "stream_end")
