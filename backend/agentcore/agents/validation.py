"""Post-hoc acceptance checks for agent responses."""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from agentcore.exceptions import ValidationError
from agentcore.models.agent_schemas import AgentResponse


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid

    def raise_for_errors(self) -> None:
        """Opt-in escalation: raise ValidationError when any check failed."""
        if not self.valid:
            raise ValidationError("Response failed validation: " + "; ".join(self.errors), errors=list(self.errors))


def validate_response(
    response: AgentResponse | str,
    *,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    required_words: Optional[Iterable[str]] = None,
    forbidden_words: Optional[Iterable[str]] = None,
    required_patterns: Optional[Iterable[str | re.Pattern]] = None,
) -> ValidationResult:
    """Check a response against length, vocabulary and pattern requirements. Never raises."""
    content = response.content if isinstance(response, AgentResponse) else response
    lowered = content.lower()
    errors: list[str] = []

    if min_length is not None and len(content) < min_length:
        errors.append(f"Response too short ({len(content)} < {min_length})")

    if max_length is not None and len(content) > max_length:
        errors.append(f"Response too long ({len(content)} > {max_length})")

    if required_words:
        missing = [w for w in required_words if w.lower() not in lowered]
        if missing:
            errors.append(f"Missing required words: {', '.join(missing)}")

    if forbidden_words:
        found = [w for w in forbidden_words if w.lower() in lowered]
        if found:
            errors.append(f"Contains forbidden words: {', '.join(found)}")

    if required_patterns:
        unmatched = [
            p.pattern if isinstance(p, re.Pattern) else p
            for p in required_patterns
            if not re.search(p, content)
        ]
        if unmatched:
            errors.append(f"Missing required patterns: {', '.join(unmatched)}")

    return ValidationResult(valid=not errors, errors=errors)
