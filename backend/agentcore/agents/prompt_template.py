"""Minimal {{variable}} prompt templating."""

import re
from typing import Any, Mapping, Optional


class PromptTemplate:
    """
    Prompt template with {{variable_name}} placeholders.

    Substitution rules:
    - {{name}} -> replaced with str(value) when `name` is supplied
    - {{name}} -> left verbatim when `name` is not supplied
    - single braces (e.g. JSON examples) are never touched
    """

    _PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")

    def __init__(self, template: str) -> None:
        self.template = template

    @classmethod
    def create(cls, template: str) -> "PromptTemplate":
        return cls(template)

    @property
    def variables(self) -> list[str]:
        """Placeholder names in order of first appearance."""
        seen: dict[str, None] = {}
        for match in self._PLACEHOLDER_RE.finditer(self.template):
            seen.setdefault(match.group(1))
        return list(seen)

    def format(self, values: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> str:
        variables = {**(values or {}), **kwargs}

        def _replacer(match: re.Match) -> str:
            key = match.group(1)
            if key in variables:
                return str(variables[key])
            return match.group(0)

        return self._PLACEHOLDER_RE.sub(_replacer, self.template)

    def __repr__(self) -> str:
        return f"PromptTemplate({self.template!r})"
