from __future__ import annotations
import asyncio
from .base import TranslationError, Translator
from meratranslate.contracts import TranslationRequest, TranslationResult

class ArgosTranslator(Translator):
    """
    Offline neural translation via argostranslate. Language packages are
    installed lazily per (from, to) pair on first use.
    """

    def __init__(self, default_from: str = "en", auto_install: bool = True):
        self.default_from = default_from
        self.auto_install = auto_install
        self._ready: set[tuple[str, str]] = set()

    @property
    def name(self) -> str:
        return "argos"

    def _resolve_from(self, source_lang: str) -> str:
        return self.default_from if source_lang == "auto" else source_lang

    def _ensure_ready(self, from_code: str, to_code: str) -> None:
        if (from_code, to_code) in self._ready:
            return

        import argostranslate.package
        import argostranslate.translate

        installed = argostranslate.translate.get_installed_languages()
        have_from = any(l.code == from_code for l in installed)
        have_to = any(l.code == to_code for l in installed)

        if not (have_from and have_to):
            if not self.auto_install:
                raise TranslationError("Argos model not installed and auto_install=False")

            argostranslate.package.update_package_index()
            available = argostranslate.package.get_available_packages()

            pkg = None
            for p in available:
                if p.from_code == from_code and p.to_code == to_code:
                    pkg = p
                    break
            if pkg is None:
                raise TranslationError(f"No Argos package found for {from_code}->{to_code}")

            path = pkg.download()
            argostranslate.package.install_from_path(path)

        self._ready.add((from_code, to_code))

    def _translate_blocking(self, text: str, from_code: str, to_code: str) -> str:
        self._ensure_ready(from_code, to_code)
        import argostranslate.translate
        return argostranslate.translate.translate(text, from_code, to_code)

    async def translate(self, req: TranslationRequest) -> TranslationResult:
        from_code = self._resolve_from(req.source_lang)
        out = await asyncio.to_thread(
            self._translate_blocking, req.text.strip(), from_code, req.target_lang
        )
        return TranslationResult(source_text=req.text, translated_text=out, provider=self.name)
