"""Structured-output extraction from free-form model responses."""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

_FENCED_JSON_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)
_BRACE_SPAN_RE = re.compile(r"\{.*\}", re.DOTALL)
_CODE_BLOCK_RE = re.compile(r"```([\w+#.-]+)?[ \t]*\n(.*?)```", re.DOTALL)
_BULLET_RE = re.compile(r"^\s*[-*•]\s+(.+)$")
_NUMBERED_RE = re.compile(r"^\s*\d+[.)]\s+(.+)$")


@dataclass(frozen=True)
class CodeBlock:
    language: str
    code: str


def extract_json(content: str) -> Optional[Any]:
    """
    3-tier JSON extraction:
      1. Direct parse of the whole text
      2. Contents of a ```json ... ``` fenced block
      3. The outermost {...} span
    Returns None when nothing parses to an object or array.
    """
    for candidate in _json_candidates(content):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, (dict, list)):
            return parsed
    return None


def _json_candidates(content: str):
    yield content.strip()
    for match in _FENCED_JSON_RE.finditer(content):
        yield match.group(1).strip()
    match = _BRACE_SPAN_RE.search(content)
    if match:
        yield match.group(0)


def extract_code_blocks(content: str) -> list[CodeBlock]:
    return [
        CodeBlock(language=match.group(1) or "text", code=match.group(2).strip())
        for match in _CODE_BLOCK_RE.finditer(content)
    ]


def extract_list(content: str) -> list[str]:
    """Bulleted (-, *, •) and numbered (1. / 1)) items, in order."""
    items: list[str] = []
    for line in content.splitlines():
        match = _BULLET_RE.match(line) or _NUMBERED_RE.match(line)
        if match:
            items.append(match.group(1).strip())
    return items
