from __future__ import annotations
from .base import Translator
from meratranslate.contracts import TranslationRequest, TranslationResult

PHRASEBOOK: dict[str, dict[str, str]] = {
    "en-es": {
        "hello": "hola",
        "goodbye": "adiós",
        "thank you": "gracias",
        "please": "por favor",
        "yes": "sí",
        "no": "no",
        "good morning": "buenos días",
        "good night": "buenas noches",
        "how are you": "cómo estás",
        "hello, how are you?": "hola, ¿cómo estás?",
        "thank you very much": "muchas gracias",
        "excuse me": "disculpe",
        "where is the bathroom?": "¿dónde está el baño?",
        "how much does it cost?": "¿cuánto cuesta?",
        "i don't understand": "no entiendo",
        "can you help me?": "¿puedes ayudarme?",
        "see you later": "hasta luego",
    },
    "en-fr": {
        "hello": "bonjour",
        "goodbye": "au revoir",
        "thank you": "merci",
        "please": "s'il vous plaît",
        "yes": "oui",
        "no": "non",
        "good morning": "bonjour",
        "good night": "bonne nuit",
        "how are you": "comment allez-vous",
        "hello, how are you?": "bonjour, comment allez-vous?",
        "thank you very much": "merci beaucoup",
        "excuse me": "excusez-moi",
        "where is the bathroom?": "où sont les toilettes?",
        "how much does it cost?": "combien ça coûte?",
        "i don't understand": "je ne comprends pas",
        "can you help me?": "pouvez-vous m'aider?",
        "see you later": "à plus tard",
    },
    "en-de": {
        "hello": "hallo",
        "goodbye": "auf wiedersehen",
        "thank you": "danke",
        "please": "bitte",
        "yes": "ja",
        "no": "nein",
        "good morning": "guten morgen",
        "good night": "gute nacht",
        "how are you": "wie geht es dir",
        "hello, how are you?": "hallo, wie geht es dir?",
        "thank you very much": "vielen dank",
        "excuse me": "entschuldigung",
        "where is the bathroom?": "wo ist das badezimmer?",
        "how much does it cost?": "wie viel kostet das?",
        "i don't understand": "ich verstehe nicht",
        "can you help me?": "können sie mir helfen?",
        "see you later": "bis später",
    },
    "en-hi": {
        "hello": "नमस्ते",
        "goodbye": "अलविदा",
        "thank you": "धन्यवाद",
        "please": "कृपया",
        "yes": "हाँ",
        "no": "नहीं",
        "good morning": "सुप्रभात",
        "good night": "शुभ रात्रि",
        "how are you": "आप कैसे हैं",
        "hello, how are you?": "नमस्ते, आप कैसे हैं?",
        "thank you very much": "बहुत धन्यवाद",
        "excuse me": "माफ़ कीजिये",
        "where is the bathroom?": "बाथरूम कहाँ है?",
        "how much does it cost?": "यह कितने का है?",
        "i don't understand": "मुझे समझ नहीं आया",
        "can you help me?": "क्या आप मेरी मदद कर सकते हैं?",
        "see you later": "बाद में मिलते हैं",
    },
}

LANGUAGE_TAGS: dict[str, str] = {
    code: f"[{code.upper()}] "
    for code in (
        "es", "fr", "de", "it", "pt", "ru", "ja", "ko", "zh",
        "ar", "hi", "tr", "nl", "pl", "sv", "da", "no", "fi",
    )
}
DEFAULT_TAG = "[TRANSLATED] "


def phrasebook_key(source_lang: str, target_lang: str) -> str:
    # "auto" detection is assumed to be English for offline lookups.
    if source_lang == "auto":
        return f"en-{target_lang}"
    return f"{source_lang}-{target_lang}"


def placeholder_translation(text: str, target_lang: str) -> str:
    return f"{LANGUAGE_TAGS.get(target_lang, DEFAULT_TAG)}{text}"


class PhrasebookTranslator(Translator):
    """Offline translator used when the remote endpoint is unusable."""

    def __init__(self, phrasebook: dict[str, dict[str, str]] | None = None) -> None:
        self.phrasebook = PHRASEBOOK if phrasebook is None else phrasebook

    @property
    def name(self) -> str:
        return "phrasebook"

    def lookup(self, text: str, source_lang: str, target_lang: str) -> str:
        phrases = self.phrasebook.get(phrasebook_key(source_lang, target_lang), {})
        found = phrases.get(text.lower().strip())
        if found:
            return found
        return placeholder_translation(text, target_lang)

    async def translate(self, req: TranslationRequest) -> TranslationResult:
        out = self.lookup(req.text, req.source_lang, req.target_lang)
        return TranslationResult(
            source_text=req.text,
            translated_text=out,
            provider=self.name,
            fallback="endpoint",
        )
