from __future__ import annotations
import os
from typing import Any
from .base import Translator
from .argos import ArgosTranslator
from .google import DEFAULT_ENDPOINT, GoogleTranslateClient
from .phrasebook import PhrasebookTranslator

def get_translator(provider: str | None = None, **options: Any) -> Translator:
    provider = (provider or os.getenv("MERATRANSLATE_TRANSLATOR", "google")).lower().strip()

    if provider == "google":
        return GoogleTranslateClient(
            endpoint_url=str(options.get("endpoint_url") or DEFAULT_ENDPOINT),
            client_id=str(options.get("client_id") or "gtx"),
            output_format=str(options.get("output_format") or "t"),
            timeout_sec=options.get("timeout_sec"),
            client=options.get("client"),
        )
    if provider == "argos":
        return ArgosTranslator()
    if provider == "phrasebook":
        return PhrasebookTranslator()

    raise ValueError(f"Unknown translator provider: {provider}")
