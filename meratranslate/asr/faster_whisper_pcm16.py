from __future__ import annotations

import os
import tempfile
import wave
from typing import List, Optional


def _write_pcm16_wav(path: str, pcm16: bytes, sample_rate: int, channels: int) -> None:
    with wave.open(path, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm16)


def whisper_language(tag: Optional[str]) -> Optional[str]:
    """BCP-47 tag ("en-US") to the bare code whisper expects ("en"); "auto"/None -> detect."""
    if not tag or tag.lower() == "auto":
        return None
    return tag.split("-")[0].split("_")[0].lower()


class FasterWhisperPCM16Transcriber:
    def __init__(
        self,
        *,
        model_size: str = "tiny",
        device: str = "cpu",
        compute_type: str = "int8",
        language: Optional[str] = "en-US",
        beam_size: int = 1,
    ) -> None:
        self.model_size = model_size
        self.device = device
        self.compute_type = compute_type
        self.language = whisper_language(language)
        self.beam_size = beam_size
        self._model = None

    def _get_model(self):
        if self._model is None:
            from faster_whisper import WhisperModel

            self._model = WhisperModel(
                self.model_size,
                device=self.device,
                compute_type=self.compute_type,
            )
        return self._model

    def transcribe_utterance(self, pcm16: bytes, sample_rate: int, channels: int) -> List[str]:
        """Return the non-empty segment texts of one utterance, in order."""
        if not pcm16:
            return []

        model = self._get_model()

        fd, tmp_path = tempfile.mkstemp(suffix=".wav", prefix="meratranslate_utter_")
        os.close(fd)
        try:
            _write_pcm16_wav(tmp_path, pcm16, sample_rate=sample_rate, channels=channels)
            segments, _info = model.transcribe(
                tmp_path,
                language=self.language,
                beam_size=self.beam_size,
                vad_filter=False,
                condition_on_previous_text=False,
            )
            out: List[str] = []
            for s in segments:
                text = (s.text or "").strip()
                if text:
                    out.append(text)
            return out
        finally:
            try:
                os.remove(tmp_path)
            except OSError:
                pass
