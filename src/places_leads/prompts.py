from __future__ import annotations

from typing import Iterable, Protocol


class InputProvider(Protocol):
    def ask(self, question: str) -> str:
        ...


class ConsoleInput:
    def ask(self, question: str) -> str:
        return input(question)


class ScriptedInput:
    """Replays canned answers in order, for tests and non-interactive runs."""

    def __init__(self, answers: Iterable[str]) -> None:
        self._answers = list(answers)
        self.questions: list[str] = []

    def ask(self, question: str) -> str:
        self.questions.append(question)
        if not self._answers:
            raise RuntimeError(f"No scripted answer left for prompt {question!r}")
        return self._answers.pop(0)


def prompt_search(provider: InputProvider) -> tuple[str, str]:
    """Ask for the city and business type to search."""
    city = provider.ask("Enter city name: ").strip()
    if not city:
        raise ValueError("City name is required")
    category = provider.ask("Enter business type: ").strip()
    if not category:
        raise ValueError("Business type is required")
    return city, category
