"""
Configuration resolver — one immutable Configuration per run.

Three ways in, chosen explicitly by the caller:

    UseDefaultQuestions()        → prompt with the built-in questions
    OverrideQuestions(questions) → prompt with caller-supplied questions
    StaticConfig(values)         → no prompting; explicit values win,
                                   everything else comes from the
                                   questions' declared defaults

The result is cached: ``collect()`` prompts (or merges) at most once.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from pydantic import ValidationError

from expresskit.core.config.questions import (
    DEFAULT_QUESTIONS,
    Question,
    extract_defaults,
    missing_answers,
)
from expresskit.core.errors import ConfigIncomplete
from expresskit.core.models.config import (
    ConfigSource,
    Configuration,
    OverrideQuestions,
    StaticConfig,
    UseDefaultQuestions,
)

logger = logging.getLogger(__name__)


class QuestionProvider(Protocol):
    """Anything that can answer a list of questions.

    Returns None when the user abandons the session.
    """

    def ask(self, questions: Sequence[Question]) -> Mapping[str, Any] | None: ...


class ConfigResolver:
    """Resolve and cache the scaffold Configuration."""

    def __init__(
        self,
        source: ConfigSource | None = None,
        provider: QuestionProvider | None = None,
    ):
        self.source: ConfigSource = source if source is not None else UseDefaultQuestions()
        self.provider = provider
        self._config: Configuration | None = None
        self._answers: dict[str, Any] = {}

    @property
    def questions(self) -> tuple[Question, ...]:
        """The active question specification."""
        if isinstance(self.source, OverrideQuestions):
            return tuple(self.source.questions)
        return DEFAULT_QUESTIONS

    @property
    def resolved(self) -> bool:
        return self._config is not None

    @property
    def answers(self) -> dict[str, Any]:
        """The raw merged/collected answers, including non-config fields."""
        return dict(self._answers)

    def collect(self) -> Configuration:
        """Return the configuration, resolving it on the first call.

        Raises:
            ConfigIncomplete: Interactive collection was abandoned, or
                the answers do not form a valid configuration.
        """
        if self._config is not None:
            return self._config

        if isinstance(self.source, StaticConfig):
            answers = self._merge_static(self.source)
        else:
            answers = self._ask()

        try:
            config = Configuration.model_validate(answers)
        except ValidationError as e:
            raise ConfigIncomplete(f"Invalid configuration: {e}") from e

        self._answers = dict(answers)
        self._config = config
        logger.info(
            "Configuration resolved: language=%s features=%s",
            config.language.value,
            sorted(f.value for f in config.features) or "none",
        )
        return config

    def _merge_static(self, static: StaticConfig) -> dict[str, Any]:
        merged = extract_defaults(self.questions)
        explicit = {k: v for k, v in static.values.items() if v is not None}
        merged.update(explicit)
        logger.debug("Static config merged over defaults: %s", merged)
        return merged

    def _ask(self) -> dict[str, Any]:
        if self.provider is None:
            raise ConfigIncomplete("No question provider available for interactive setup")

        answers = self.provider.ask(self.questions)
        if answers is None:
            raise ConfigIncomplete("Setup was cancelled before it finished")

        missing = missing_answers(self.questions, answers)
        if missing:
            raise ConfigIncomplete(f"Missing answers for: {', '.join(missing)}")
        return dict(answers)
