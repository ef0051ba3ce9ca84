from __future__ import annotations

import logging
from argparse import Namespace

from meratranslate.app import services as app_services
from meratranslate.nlp.translator.google import GoogleTranslateClient
from meratranslate.nlp.translator.phrasebook import PhrasebookTranslator
from meratranslate.speech.platform import PlatformCapabilities
from meratranslate.speech.recognizer import SpeechCapture


def _args(translator: str = "google") -> Namespace:
    return Namespace(
        translator=translator,
        endpoint_url="http://translate.test/single",
        client_id="gtx",
        output_format="t",
        request_timeout_sec=4.0,
        history_delay_sec=0.0,
        recognition_language="en-GB",
        model="base",
        device=None,
        sr=16000,
        channels=1,
        chunk_sec=0.5,
        rms_th=180.0,
        silence_chunks=3,
        min_utter_sec=0.3,
        max_utter_sec=None,
        no_speech_timeout_sec=4.0,
    )


class _Notifier:
    def notify(self, notice) -> None:
        pass


def test_build_services_wires_pipeline_and_backend(monkeypatch) -> None:
    captured: dict[str, object] = {}

    def fake_detect(**options):
        captured.update(options)
        return PlatformCapabilities()

    monkeypatch.setattr(app_services, "detect_capabilities", fake_detect)
    services = app_services.build_services(_args(), notifier=_Notifier(), logger=logging.getLogger("tests.app"))

    assert isinstance(services.translator, GoogleTranslateClient)
    assert services.translator.endpoint_url == "http://translate.test/single"
    assert services.translator.timeout_sec == 4.0
    assert services.pipeline.primary is services.translator
    assert isinstance(services.pipeline.fallback, PhrasebookTranslator)
    assert services.pipeline.history is services.history
    assert services.history.delay_sec == 0.0
    assert services.recognition_settings.language == "en-GB"
    assert captured["model"] == "base"
    assert captured["language"] == "en-GB"
    assert captured["silence_chunks"] == 3
    assert captured["max_utter_sec"] is None


def test_speech_capture_shares_capabilities(monkeypatch) -> None:
    caps = PlatformCapabilities()
    monkeypatch.setattr(app_services, "detect_capabilities", lambda **options: caps)
    services = app_services.build_services(
        _args("phrasebook"), notifier=_Notifier(), logger=logging.getLogger("tests.app")
    )
    capture = services.speech_capture(lambda event: None)
    assert isinstance(capture, SpeechCapture)
    assert capture.capabilities is caps
    assert capture.settings.language == "en-GB"
