"""
PRISMA Studio JSON Recovery
Turns raw model completions (fenced, chatty or truncated) into parseable JSON.
"""

import json
import re
from typing import Any, List, Optional, Tuple

from prisma_studio.core.errors import JsonStructuralError
from prisma_studio.core.logging import get_logger


__all__ = ["EMPTY_OBJECT", "recover_json", "parse_recovered_json"]


EMPTY_OBJECT = "{}"

_FENCE_OPEN = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\r?\n?")
_FENCE_CLOSE = re.compile(r"\r?\n?[ \t]*```$")
_DANGLING_KEY = re.compile(r'(?<=[{,])\s*"(?:[^"\\]|\\.)*"\s*$')
_PARTIAL_UNICODE_ESCAPE = re.compile(r"(\\+)u[0-9A-Fa-f]{0,3}$")
_TRAILING_SCALAR = re.compile(r'(?<=[:\[{,])(\s*)([^\s"\[\]{},:]+)$')
_COMPLETE_SCALAR = re.compile(r"true|false|null|-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")

_CLOSERS = {"{": "}", "[": "]"}

logger = get_logger(__name__)


def _strip_code_fences(text: str) -> str:
    cleaned = _FENCE_OPEN.sub("", text, count=1)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def _find_root(text: str) -> int:
    positions = [pos for pos in (text.find("{"), text.find("[")) if pos >= 0]
    return min(positions) if positions else -1


def _scan_root(text: str) -> Tuple[str, bool, int]:
    """
    Walk the candidate from its root opener.

    Returns the candidate (cut at the root's true end or at a stray closer),
    whether the root closed cleanly, and the index of the last safe cut point
    (a `}`, `]` or `,` outside any string). A closer with no matching opener
    on top of the stack counts as stray.
    """
    stack: List[str] = []
    in_string = False
    escaped = False
    last_safe = -1

    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == ",":
            last_safe = index
        elif char in _CLOSERS:
            stack.append(char)
        elif char in "}]":
            if not stack or _CLOSERS[stack[-1]] != char:
                return text[:index], False, last_safe
            stack.pop()
            if not stack:
                return text[: index + 1], True, last_safe
            last_safe = index

    return text, False, last_safe


def _open_structures(text: str) -> Tuple[List[str], bool, bool]:
    """Stack of unclosed openers plus (in_string, escaped) at the end of text."""
    stack: List[str] = []
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _CLOSERS:
            stack.append(char)
        elif char in "}]" and stack and _CLOSERS[stack[-1]] == char:
            stack.pop()
    return stack, in_string, escaped


def _closing_suffix(stack: List[str]) -> str:
    return "".join(_CLOSERS[opener] for opener in reversed(stack))


def _strip_trailing_comma(text: str) -> str:
    text = text.rstrip()
    if text.endswith(","):
        text = text[:-1].rstrip()
    return text


def _repair_at_safe_point(text: str, last_safe: int) -> str:
    cut = _strip_trailing_comma(text[: last_safe + 1])
    stack, _, _ = _open_structures(cut)
    return cut + _closing_suffix(stack)


def _close_open_string(text: str, escaped: bool) -> str:
    """Terminate a cut-off string, dropping an incomplete escape sequence."""
    if escaped:
        text = text[:-1]
    else:
        partial = _PARTIAL_UNICODE_ESCAPE.search(text)
        if partial and len(partial.group(1)) % 2 == 1:
            text = text[: partial.end(1) - 1]
    return text + '"'


def _drop_partial_scalar(text: str) -> str:
    """A cut-off literal or number becomes null after `:` and is dropped elsewhere."""
    match = _TRAILING_SCALAR.search(text)
    if not match or _COMPLETE_SCALAR.fullmatch(match.group(2)):
        return text
    head = text[: match.start()].rstrip()
    return head + "null" if head.endswith(":") else head


def _repair_without_safe_point(text: str) -> str:
    stack, in_string, escaped = _open_structures(text)
    if in_string:
        text = _close_open_string(text, escaped)
    text = _drop_partial_scalar(text.rstrip())

    if stack and stack[-1] == "{" and _DANGLING_KEY.search(text):
        text = _DANGLING_KEY.sub("", text)
    text = _strip_trailing_comma(text)
    if text.endswith(":"):
        text += "null"

    stack, _, _ = _open_structures(text)
    return text + _closing_suffix(stack)


def _finalize(text: str) -> str:
    """Flatten raw line breaks and drop commas that directly precede a closer."""
    out: List[str] = []
    in_string = False
    escaped = False
    for char in text:
        if char in "\r\n":
            char = " "
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            out.append(char)
            continue
        if char == '"':
            in_string = True
        elif char in "}]":
            pos = len(out) - 1
            while pos >= 0 and out[pos].isspace():
                pos -= 1
            if pos >= 0 and out[pos] == ",":
                del out[pos]
        out.append(char)
    return "".join(out)


def recover_json(raw_text: Optional[str]) -> str:
    """
    Extract the first JSON object or array from a completion.

    The result always parses for fenced, prefixed or suffixed JSON and for
    completions truncated by an output-token ceiling; truncated content is
    cut back to the last complete element and the open structures are closed
    in reverse order. Returns "{}" when no `{` or `[` is present.
    """
    if not raw_text:
        return EMPTY_OBJECT

    cleaned = _strip_code_fences(raw_text.strip())
    start = _find_root(cleaned)
    if start < 0:
        logger.debug("json_recovery_no_structure", preview=cleaned[:120])
        return EMPTY_OBJECT

    candidate, finished, last_safe = _scan_root(cleaned[start:])

    if not finished:
        if last_safe >= 0:
            candidate = _repair_at_safe_point(candidate, last_safe)
        else:
            candidate = _repair_without_safe_point(candidate)
        logger.info(
            "json_recovery_repaired",
            original_length=len(raw_text),
            recovered_length=len(candidate),
            used_safe_point=last_safe >= 0,
        )

    return _finalize(candidate)


def parse_recovered_json(raw_text: Optional[str], task: str = "parse") -> Any:
    """
    Recover and parse a completion.

    A failed parse gets exactly one retry with an extra closing brace before
    JsonStructuralError is raised.
    """
    recovered = recover_json(raw_text)
    try:
        return json.loads(recovered)
    except (ValueError, RecursionError) as first_error:
        logger.warning(
            "json_recovery_parse_failed",
            task=task,
            error=str(first_error),
            preview=recovered[:200],
        )
        try:
            return json.loads(recovered + "}")
        except (ValueError, RecursionError):
            raise JsonStructuralError(
                details={
                    "task": task,
                    "error": str(first_error),
                    "snippet": recovered[:200],
                }
            ) from first_error
