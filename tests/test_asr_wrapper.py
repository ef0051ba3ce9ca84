from unittest.mock import MagicMock

from meratranslate.asr.faster_whisper_pcm16 import FasterWhisperPCM16Transcriber, whisper_language


def test_transcribe_utterance_keeps_non_empty_segments(monkeypatch):
    fake_model = MagicMock()
    seg1 = MagicMock(start=0.0, end=1.2, text=" Hello")
    seg2 = MagicMock(start=1.2, end=1.4, text="  ")
    seg3 = MagicMock(start=1.4, end=2.5, text="world. ")
    fake_model.transcribe.return_value = ([seg1, seg2, seg3], MagicMock())

    tr = FasterWhisperPCM16Transcriber(model_size="base", language="en-US")
    monkeypatch.setattr(tr, "_get_model", lambda: fake_model)

    out = tr.transcribe_utterance(b"\x00\x01" * 1600, sample_rate=16000, channels=1)
    assert out == ["Hello", "world."]
    _, kwargs = fake_model.transcribe.call_args
    assert kwargs["language"] == "en"


def test_transcribe_utterance_empty_audio_skips_model(monkeypatch):
    tr = FasterWhisperPCM16Transcriber()
    monkeypatch.setattr(tr, "_get_model", lambda: (_ for _ in ()).throw(AssertionError("loaded")))
    assert tr.transcribe_utterance(b"", sample_rate=16000, channels=1) == []


def test_whisper_language():
    assert whisper_language("en-US") == "en"
    assert whisper_language("pt_BR") == "pt"
    assert whisper_language("auto") is None
    assert whisper_language(None) is None
