"""
Question specification — declarative descriptors for interactive setup.

The engine never renders prompts itself. It hands an ordered tuple of
Question descriptors to a question provider and gets back a mapping
``name → answer``. The same descriptors double as the defaults schema
used when a static configuration is supplied.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from expresskit.core.models.config import FEATURE_LABELS, Language

QuestionKind = Literal["list", "checkbox", "input", "confirm"]


@dataclass(frozen=True)
class Choice:
    """One selectable option: a display label and the value it yields."""

    name: str
    value: Any


@dataclass(frozen=True)
class Question:
    """A single question descriptor.

    Attributes:
        kind:     Prompt style (list, checkbox, input, confirm).
        name:     Key of the answer in the resulting mapping.
        message:  Prompt text.
        choices:  Selectable options for list/checkbox questions.
        default:  A literal, or a pure function of the defaults
                  computed for earlier questions (``dict → value``).
        required: Whether collection is incomplete without an answer.
    """

    kind: QuestionKind
    name: str
    message: str
    choices: tuple[Choice, ...] = ()
    default: Any = None
    required: bool = True

    def choice_values(self) -> list[Any]:
        return [c.value for c in self.choices]


LANGUAGE_QUESTION = Question(
    kind="list",
    name="language",
    message="Which language do you want?",
    choices=tuple(Choice(lang.value, lang.value) for lang in Language),
    default=Language.JAVASCRIPT.value,
)

FEATURES_QUESTION = Question(
    kind="checkbox",
    name="features",
    message="Select features to include:",
    choices=tuple(Choice(label, feat.value) for feat, label in FEATURE_LABELS.items()),
    default=(),
)

DEFAULT_QUESTIONS: tuple[Question, ...] = (LANGUAGE_QUESTION, FEATURES_QUESTION)

DEFAULT_PROJECT_NAME = "my-express-app"

PROJECT_NAME_QUESTION = Question(
    kind="input",
    name="project_name",
    message="Project name:",
    default=DEFAULT_PROJECT_NAME,
)


def overwrite_question(project_name: str) -> Question:
    """Confirmation asked when the target directory already exists."""
    return Question(
        kind="confirm",
        name="overwrite",
        message=f'Directory "{project_name}" already exists. Remove and continue?',
        default=False,
    )


def extract_defaults(questions: Sequence[Question]) -> dict[str, Any]:
    """Compute the default answer for every question, in order.

    Pure: no prompting, no I/O. A callable default receives a copy of
    the defaults resolved so far. List questions without a default
    fall back to their first choice; checkbox questions to an empty
    selection; anything else to None.
    """
    defaults: dict[str, Any] = {}
    for question in questions:
        default = question.default
        if callable(default):
            default = default(dict(defaults))
        if default is None:
            default = _fallback_default(question)
        if isinstance(default, tuple):
            default = list(default)
        defaults[question.name] = default
    return defaults


def _fallback_default(question: Question) -> Any:
    if question.kind == "list" and question.choices:
        return question.choices[0].value
    if question.kind == "checkbox":
        return []
    if question.kind == "confirm":
        return False
    return None


def missing_answers(questions: Sequence[Question], answers: Mapping[str, Any]) -> list[str]:
    """Names of required questions with no usable answer."""
    missing = []
    for question in questions:
        if not question.required:
            continue
        value = answers.get(question.name)
        if value is None or (question.kind == "input" and value == ""):
            missing.append(question.name)
    return missing
