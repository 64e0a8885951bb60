"""
Best-effort JSON extraction and repair for LLM output.

Generation backends rarely return clean JSON: objects come wrapped in
markdown fences or chatty prose, with single quotes, trailing commas,
unquoted keys or bare-word values. These helpers recover a JSON object
from such text; schema validation happens afterwards, in the caller.
"""

import ast
import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_FENCE_OPEN_RE = re.compile(r"```(?:json|JSON)?\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_PY_LITERAL_RE = re.compile(r"([:\[,]\s*)(None|True|False)\b")
_BARE_KEY_RE = re.compile(r"([\{,]\s*)([A-Za-z_][A-Za-z0-9_\-]*)(\s*:)")
_SINGLE_QUOTED_KEY_RE = re.compile(r"([\{,]\s*)'([^'\"]*)'(\s*:)")
_SINGLE_QUOTED_VALUE_RE = re.compile(r"([:\[,]\s*)'(.*?)'(\s*[,}\]])")
_BARE_VALUE_RE = re.compile(r"(:\s*)([A-Za-z][A-Za-z0-9_\- ]*?)(\s*[,}\]])")

_JSON_LITERALS = {"true", "false", "null"}
_PY_TO_JSON = {"None": "null", "True": "true", "False": "false"}


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences, keeping their content."""
    result = _FENCE_OPEN_RE.sub("", text)
    return _FENCE_CLOSE_RE.sub("", result).strip()


def extract_json_object(text: str) -> str | None:
    """
    Extract the first balanced ``{...}`` block from text.

    Braces inside double-quoted strings are ignored. A block that is never
    closed (truncated output) is returned from its opening brace onwards.

    Returns:
        The JSON-looking substring, or None if the text has no ``{``.
    """
    start_idx = text.find("{")
    if start_idx == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i, char in enumerate(text[start_idx:], start=start_idx):
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
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start_idx : i + 1]

    return text[start_idx:]


def _double_quote(value: str) -> str:
    return '"' + value.replace("\\'", "'").replace('"', '\\"') + '"'


def fix_json_string(json_str: str) -> str:
    """
    Attempt to fix common JSON issues from LLM output.

    Args:
        json_str: Raw JSON string that may have issues.

    Returns:
        Cleaned JSON string.
    """
    if not json_str:
        return ""

    result = strip_code_fences(json_str.strip())

    # Normalize curly quotes.
    result = (
        result.replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
    )

    # Raw newlines and control characters are invalid inside JSON strings.
    result = _CONTROL_CHARS_RE.sub(" ", result)

    result = _TRAILING_COMMA_RE.sub(r"\1", result)

    # Python literals in value position.
    result = _PY_LITERAL_RE.sub(lambda m: m.group(1) + _PY_TO_JSON[m.group(2)], result)

    # Quote bare keys ({foo: "bar"}) and single-quoted keys ({'foo': "bar"}).
    result = _BARE_KEY_RE.sub(r'\1"\2"\3', result)
    result = _SINGLE_QUOTED_KEY_RE.sub(lambda m: m.group(1) + _double_quote(m.group(2)) + m.group(3), result)

    # Single-quoted values; non-greedy up to a quote that closes the value.
    result = _SINGLE_QUOTED_VALUE_RE.sub(
        lambda m: m.group(1) + _double_quote(m.group(2)) + m.group(3),
        result,
    )

    # Bare-word values ({"category": technical}).
    def _quote_bare_value(match: re.Match[str]) -> str:
        word = match.group(2).strip()
        if word.lower() in _JSON_LITERALS:
            return match.group(1) + word.lower() + match.group(3)
        return match.group(1) + _double_quote(word) + match.group(3)

    result = _BARE_VALUE_RE.sub(_quote_bare_value, result)

    return result


def coerce_to_json_types(obj: Any) -> Any:
    """Coerce a Python object to JSON-safe types.

    Used after the ``ast.literal_eval`` fallback so that Python-only values
    (e.g. ``Ellipsis``) never leak into the rest of the system.
    """
    if obj is ...:
        return None
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, dict):
        return {str(k): coerce_to_json_types(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [coerce_to_json_types(v) for v in obj]
    return str(obj)


def parse_json_loose(raw: str) -> dict[str, Any] | list[Any] | None:
    """Parse JSON with best-effort repair.

    Returns a dict/list on success, else None.
    """
    if not raw or not raw.strip():
        return None

    try:
        parsed = json.loads(raw)
        if isinstance(parsed, (dict, list)):
            return parsed
    except (json.JSONDecodeError, RecursionError):
        pass

    cleaned = fix_json_string(raw)
    try:
        parsed = json.loads(cleaned)
        if isinstance(parsed, (dict, list)):
            return parsed
    except (json.JSONDecodeError, RecursionError):
        pass

    # Fallback: parse as a Python literal, then round-trip through json.
    obj: Any = None
    for candidate in (raw.strip(), cleaned):
        try:
            obj = ast.literal_eval(candidate)
            break
        except (ValueError, SyntaxError, MemoryError, RecursionError, TypeError):
            continue

    if not isinstance(obj, (dict, list, tuple, set)):
        return None

    try:
        return json.loads(json.dumps(coerce_to_json_types(obj)))
    except (TypeError, ValueError, RecursionError):
        return None


def parse_json_object(text: str) -> dict[str, Any] | None:
    """
    Recover a single JSON object from raw model output.

    Handles markdown fences and leading/trailing prose around the object.

    Returns:
        The parsed object, or None when no object can be recovered.
    """
    if not text:
        return None

    content = strip_code_fences(text.strip())
    json_str = extract_json_object(content)
    if json_str is None:
        logger.debug("No JSON object found in model output")
        return None

    parsed = parse_json_loose(json_str)
    if isinstance(parsed, dict):
        return parsed

    logger.debug(f"Unparseable JSON object in model output: {json_str[:200]}")
    return None
