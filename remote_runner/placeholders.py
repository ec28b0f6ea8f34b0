"""Placeholder substitution for test text.

Tokens look like ``{{ env.NAME }}`` or ``{{ input.NAME }}``. The scope is
case-insensitive and whitespace inside the braces is ignored. Tokens that
cannot be resolved are left exactly as written.
"""

import os
import re
from dataclasses import replace
from typing import Iterable, Mapping, Optional

from .config import InputSource
from .definitions.schema import Step, TestContext

TOKEN_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")
EXPRESSION_PATTERN = re.compile(r"^(env|input)\.([A-Za-z0-9_]+)$", re.IGNORECASE)


class PlaceholderResolver:
    """Resolves placeholder tokens against the environment and external inputs."""

    def __init__(
        self,
        inputs: Optional[InputSource] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize resolver.

        Args:
            inputs: Source for ``input.*`` tokens. Default: CI inputs from the environment.
            environ: Source for ``env.*`` tokens. Default: os.environ, read at resolve time.
        """
        self.environ = os.environ if environ is None else environ
        self.inputs = inputs if inputs is not None else InputSource(environ=self.environ)

    def resolve(self, text: Optional[str]) -> Optional[str]:
        """Replace every resolvable token in `text` in a single left-to-right pass."""
        if not isinstance(text, str) or not text:
            return text
        return TOKEN_PATTERN.sub(self._replace, text)

    def _replace(self, match: re.Match) -> str:
        expression = EXPRESSION_PATTERN.match(match.group(1).strip())
        if not expression:
            return match.group(0)

        scope, key = expression.group(1).lower(), expression.group(2)
        if scope == "env":
            value = self.environ.get(key)
            if value is not None:
                return value
        elif scope == "input":
            value = self.inputs.get(key)
            if value:
                return value
        return match.group(0)

    def resolve_steps(self, steps: Iterable[Step]) -> tuple[Step, ...]:
        return tuple(
            Step(
                action=self.resolve(step.action),
                expected_result=self.resolve(step.expected_result),
            )
            for step in steps
        )

    def resolve_context(self, context: Optional[TestContext]) -> Optional[TestContext]:
        """Resolve secret values; the rest of the context is left untouched."""
        if context is None or context.secrets is None:
            return context
        return replace(
            context,
            secrets=tuple(
                replace(secret, value=self.resolve(secret.value))
                for secret in context.secrets
            ),
        )
