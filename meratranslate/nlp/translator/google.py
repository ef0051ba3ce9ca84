from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from .base import TranslationError, Translator
from meratranslate.contracts import TranslationRequest, TranslationResult

DEFAULT_ENDPOINT = "https://translate.googleapis.com/translate_a/single"

logger = logging.getLogger(__name__)


def parse_translation_payload(data: Any) -> Optional[str]:
    """
    Rebuild the translated text from the endpoint's nested-array body:
    [[["translated", "original", None, None, conf], ...], None, "en", ...]

    Returns None when the shape is not what we expect.
    """
    if not isinstance(data, list) or not data:
        return None
    segments = data[0]
    if not isinstance(segments, list) or not segments:
        return None
    first = segments[0]
    if not isinstance(first, list) or not first:
        return None

    parts = []
    for seg in segments:
        if isinstance(seg, list) and seg and seg[0] is not None:
            parts.append(str(seg[0]))
    text = "".join(parts)
    return text or None


class GoogleTranslateClient(Translator):
    def __init__(
        self,
        *,
        endpoint_url: str = DEFAULT_ENDPOINT,
        client_id: str = "gtx",
        output_format: str = "t",
        timeout_sec: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.client_id = client_id
        self.output_format = output_format
        self.timeout_sec = timeout_sec
        self._client = client

    @property
    def name(self) -> str:
        return "google"

    def build_params(self, req: TranslationRequest) -> dict[str, str]:
        return {
            "client": self.client_id,
            "sl": req.source_lang,
            "tl": req.target_lang,
            "dt": self.output_format,
            "q": req.text.strip(),
        }

    async def _get(self, params: dict[str, str]) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if self._client is not None:
            return await self._client.get(self.endpoint_url, params=params, headers=headers)
        async with httpx.AsyncClient(timeout=self.timeout_sec) as client:
            return await client.get(self.endpoint_url, params=params, headers=headers)

    async def translate(self, req: TranslationRequest) -> TranslationResult:
        try:
            resp = await self._get(self.build_params(req))
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise TranslationError(
                f"Translation API error: {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise TranslationError(f"Translation API request failed: {e}") from e
        except json.JSONDecodeError as e:
            raise TranslationError(f"Translation API returned invalid JSON: {e}") from e

        translated = parse_translation_payload(data)
        if translated is None:
            logger.warning(
                "translate_structural_mismatch",
                extra={
                    "source_lang": req.source_lang,
                    "target_lang": req.target_lang,
                    "chars": len(req.text),
                    "payload_type": type(data).__name__,
                },
            )
            return TranslationResult(
                source_text=req.text,
                translated_text=req.text,
                provider=self.name,
                fallback="structural",
            )
        return TranslationResult(source_text=req.text, translated_text=translated, provider=self.name)
