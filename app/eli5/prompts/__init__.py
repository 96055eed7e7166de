"""Facade over the prompt modules used by the reply backends."""

from __future__ import annotations
from typing import Sequence

from eli5.models import ReadingLevel
from . import explain as _explain
from .common import assemble as _assemble
from .common import history_payload

__all__ = ["DefaultPromptFactory", "history_payload"]


class DefaultPromptFactory:
    def build_system(self) -> str:
        return _explain.SYSTEM_INSTRUCTION

    def level_prompt(self, level: ReadingLevel) -> str:
        return _explain.READING_LEVEL_PROMPTS[level]

    def canned_reply(self) -> str:
        return _explain.CANNED_REPLY

    def example_prompts(self) -> list[str]:
        return list(_explain.EXAMPLE_PROMPTS)

    def assemble(
        self, *, system: str, history: Sequence[dict[str, str]], user_text: str
    ) -> list[dict[str, str]]:
        return _assemble(system=system, history=history, user_text=user_text)
