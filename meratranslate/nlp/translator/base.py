from __future__ import annotations
from abc import ABC, abstractmethod
from meratranslate.contracts import TranslationRequest, TranslationResult


class TranslationError(RuntimeError):
    pass


class Translator(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def translate(self, req: TranslationRequest) -> TranslationResult: ...
