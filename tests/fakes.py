# tests/fakes.py

from __future__ import annotations

from collections.abc import Iterable


class ScriptedInput:
    """
    Deterministic replacement for input().

    - Returns the scripted answers in order
    - Captures prompts for assertions
    - Raises EOFError once the script runs out (like a closed stdin)
    """

    def __init__(self, answers: Iterable[str]) -> None:
        self._answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str = "") -> str:
        self.prompts.append(prompt)
        if not self._answers:
            raise EOFError
        return self._answers.pop(0)

    @property
    def remaining(self) -> int:
        return len(self._answers)


class Collector:
    """Captures emitted/printed lines."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def __call__(self, text: str = "") -> None:
        self.lines.append(text)

    def text(self) -> str:
        return "\n".join(self.lines)
