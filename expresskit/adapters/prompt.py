"""
Click question provider — renders Question descriptors on the terminal.

    provider = ClickQuestionProvider()
    answers = provider.ask(DEFAULT_QUESTIONS)   # {"language": ..., "features": [...]}

Returns None if the user aborts (Ctrl-C / Ctrl-D at a prompt), which
the config resolver turns into ConfigIncomplete.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

import click

from expresskit.core.config.questions import Question, extract_defaults

logger = logging.getLogger(__name__)

_SPLIT_RE = re.compile(r"[,\s]+")


class ClickQuestionProvider:
    """Ask questions one after another with click prompts."""

    def ask(self, questions: Sequence[Question]) -> Mapping[str, Any] | None:
        defaults = extract_defaults(questions)
        answers: dict[str, Any] = {}
        try:
            for question in questions:
                answers[question.name] = self._ask_one(question, defaults.get(question.name))
        except click.Abort:
            logger.debug("Prompt aborted after %d answer(s)", len(answers))
            click.echo()
            return None
        return answers

    def _ask_one(self, question: Question, default: Any) -> Any:
        if question.kind == "confirm":
            return click.confirm(question.message, default=bool(default))
        if question.kind == "list":
            return self._ask_list(question, default)
        if question.kind == "checkbox":
            return self._ask_checkbox(question, default or [])
        return click.prompt(question.message, default=default, show_default=default is not None)

    def _ask_list(self, question: Question, default: Any) -> Any:
        values = [str(v) for v in question.choice_values()]
        answer = click.prompt(
            question.message,
            type=click.Choice(values, case_sensitive=False),
            default=str(default) if default is not None else None,
            show_choices=True,
        )
        # Map back to the declared value (case-insensitive match above).
        for choice in question.choices:
            if str(choice.value).lower() == str(answer).lower():
                return choice.value
        return answer

    def _ask_checkbox(self, question: Question, default: list[Any]) -> list[Any]:
        click.echo(question.message)
        for i, choice in enumerate(question.choices, 1):
            click.echo(f"  {i}) {choice.name}")

        default_text = ",".join(str(v) for v in default)
        while True:
            raw = click.prompt(
                "Numbers or names, comma separated (empty for none)",
                default=default_text,
                show_default=bool(default_text),
            )
            selected, unknown = parse_selection(question, raw)
            if not unknown:
                return selected
            click.secho(f"   Unknown option(s): {', '.join(unknown)}", fg="red")


def parse_selection(question: Question, raw: str) -> tuple[list[Any], list[str]]:
    """Parse ``"1, jest"`` into choice values.

    Tokens may be 1-based indexes, choice values or choice labels.
    Returns ``(selected_values, unknown_tokens)``; order follows the
    question's choice order, duplicates are dropped.
    """
    picked: set[int] = set()
    unknown: list[str] = []
    for token in _SPLIT_RE.split(raw.strip()):
        if not token:
            continue
        index = _match_choice(question, token)
        if index is None:
            unknown.append(token)
        else:
            picked.add(index)
    return [question.choices[i].value for i in sorted(picked)], unknown


def _match_choice(question: Question, token: str) -> int | None:
    if token.isdigit():
        i = int(token) - 1
        return i if 0 <= i < len(question.choices) else None
    lowered = token.lower()
    for i, choice in enumerate(question.choices):
        if lowered in (str(choice.value).lower(), choice.name.lower()):
            return i
    return None
