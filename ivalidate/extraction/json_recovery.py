"""Recover JSON objects from untrusted generative-text output.

Model output is expected to contain one JSON object but frequently arrives
wrapped in code fences, preceded by reasoning text, with trailing commas,
raw newlines inside strings, or truncated mid-array. Recovery runs an ordered
list of strategies and keeps the first that succeeds:

1. direct      - strip wrappers, locate the outermost object, ``json.loads``
2. sanitized   - re-escape control characters, collapse doubled escapes,
                 drop trailing commas, then parse again
3. field_level - pull each expected top-level key out independently
4. default     - safe default record built from the field specs

Everything here is pure: no I/O, no logging. Callers decide whether a
partial or default record is acceptable.
"""

import copy
import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Sequence

from ivalidate.errors import ParseError


class FieldKind(str, Enum):
    """JSON value type expected for a top-level key."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


_KIND_DEFAULTS: dict[FieldKind, Any] = {
    FieldKind.STRING: "",
    FieldKind.NUMBER: 0.0,
    FieldKind.INTEGER: 0,
    FieldKind.BOOLEAN: False,
    FieldKind.ARRAY: [],
    FieldKind.OBJECT: {},
}


@dataclass(frozen=True)
class FieldSpec:
    """Expected top-level key with its type and safe default."""

    name: str
    kind: FieldKind
    default: Any = None

    def default_value(self) -> Any:
        if self.default is None:
            return copy.deepcopy(_KIND_DEFAULTS[self.kind])
        return copy.deepcopy(self.default)


class RecoveryStrategy(str, Enum):
    DIRECT = "direct"
    SANITIZED = "sanitized"
    FIELD_LEVEL = "field_level"
    DEFAULT = "default"


STRATEGY_CONFIDENCE: dict[RecoveryStrategy, float] = {
    RecoveryStrategy.DIRECT: 1.0,
    RecoveryStrategy.SANITIZED: 0.9,
    RecoveryStrategy.FIELD_LEVEL: 0.5,
    RecoveryStrategy.DEFAULT: 0.1,
}


@dataclass(frozen=True)
class ParseFailure:
    """Why a single strategy did not produce a record."""

    strategy: RecoveryStrategy
    reason: str


@dataclass
class ExtractionResult:
    """Recovered record plus how it was obtained."""

    data: dict[str, Any]
    strategy: RecoveryStrategy
    confidence: float
    failures: list[ParseFailure] = field(default_factory=list)
    recovered_fields: tuple[str, ...] = ()

    @property
    def is_default(self) -> bool:
        return self.strategy == RecoveryStrategy.DEFAULT

    @property
    def is_partial(self) -> bool:
        return self.strategy == RecoveryStrategy.FIELD_LEVEL


# =============================================================================
# Text helpers
# =============================================================================

_LEADING_FENCE_RE = re.compile(r"\A```[a-zA-Z]*[ \t]*\r?\n?")
_TRAILING_FENCE_RE = re.compile(r"\r?\n?```\Z")
_INVISIBLE_CHARS = "\ufeff\u200b\u200c\u200d"
_DOUBLED_ESCAPES = (
    ('\\\\"', '\\"'),
    ("\\\\n", "\\n"),
    ("\\\\r", "\\r"),
    ("\\\\t", "\\t"),
)
_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _strip_wrappers(text: str) -> str:
    """Remove an enclosing code fence and invisible characters.

    Only a fence opening the text and one closing it are removed; backticks
    inside the payload are left alone. Fences after leading prose sit outside
    the object span and need no stripping.
    """
    text = text.strip().strip(_INVISIBLE_CHARS)
    text = _LEADING_FENCE_RE.sub("", text)
    text = _TRAILING_FENCE_RE.sub("", text.rstrip())
    return text.strip()


def _find_balanced(text: str, start: int, open_char: str, close_char: str) -> int | None:
    """Return the index of the bracket closing the one at ``start``.

    Brackets inside string literals are ignored. Returns None when the
    structure is never closed (e.g. truncated output).
    """
    depth = 0
    in_string = False
    escape_next = False

    for i in range(start, len(text)):
        char = text[i]
        if escape_next:
            escape_next = False
            continue
        if char == "\\" and in_string:
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return i

    return None


def _candidate_spans(text: str) -> list[str]:
    """Candidate object spans, outermost balanced match first."""
    start = text.find("{")
    if start == -1:
        return []

    spans = []
    end = _find_balanced(text, start, "{", "}")
    if end is not None:
        spans.append(text[start:end + 1])

    last = text.rfind("}")
    if last > start:
        greedy = text[start:last + 1]
        if greedy not in spans:
            spans.append(greedy)

    return spans


def sanitize_json_text(text: str) -> str:
    """Conservative repairs for common model JSON mistakes.

    - collapses doubled escape sequences (``\\\\n`` -> ``\\n``)
    - escapes raw newline, carriage return and tab inside strings
    - drops other control characters
    - removes trailing commas before ``}`` or ``]``
    """
    text = text.strip(_INVISIBLE_CHARS)
    for doubled, single in _DOUBLED_ESCAPES:
        text = text.replace(doubled, single)

    out: list[str] = []
    in_string = False
    escape_next = False
    length = len(text)

    for i, char in enumerate(text):
        code = ord(char)

        if in_string:
            if escape_next:
                escape_next = False
                out.append(char)
                continue
            if char == "\\":
                escape_next = True
                out.append(char)
                continue
            if char == '"':
                in_string = False
                out.append(char)
                continue
            if code < 0x20 or code == 0x7F:
                if char in _CONTROL_ESCAPES:
                    out.append(_CONTROL_ESCAPES[char])
                continue
            out.append(char)
            continue

        if char == '"':
            in_string = True
            out.append(char)
            continue
        if char == ",":
            j = i + 1
            while j < length and text[j].isspace():
                j += 1
            if j < length and text[j] in "}]":
                continue
            out.append(char)
            continue
        if (code < 0x20 and char not in _CONTROL_ESCAPES) or code == 0x7F:
            continue
        out.append(char)

    return "".join(out)


def _loads_object(text: str) -> dict[str, Any]:
    value = json.loads(text)
    if not isinstance(value, dict):
        raise ValueError(f"expected JSON object, got {type(value).__name__}")
    return value


# =============================================================================
# Strategies
# =============================================================================

def _parse_direct(text: str, fields: Sequence[FieldSpec]) -> dict[str, Any]:
    spans = _candidate_spans(_strip_wrappers(text))
    if not spans:
        raise ValueError("no JSON object found")

    last_error: Exception | None = None
    for span in spans:
        try:
            return _loads_object(span)
        except ValueError as e:
            last_error = e
    raise ValueError(str(last_error))


def _parse_sanitized(text: str, fields: Sequence[FieldSpec]) -> dict[str, Any]:
    spans = _candidate_spans(_strip_wrappers(text))
    if not spans:
        raise ValueError("no JSON object found")

    last_error: Exception | None = None
    for span in spans:
        try:
            return _loads_object(sanitize_json_text(span))
        except ValueError as e:
            last_error = e
    raise ValueError(str(last_error))


def _key_pattern(name: str, value_pattern: str) -> re.Pattern:
    return re.compile(r'"' + re.escape(name) + r'"\s*:\s*' + value_pattern, re.DOTALL)


def _decode_string(raw: str) -> str:
    try:
        return json.loads('"' + raw + '"', strict=False)
    except ValueError:
        return raw


def _split_array_items(segment: str) -> list[Any]:
    """Salvage complete objects or strings from a damaged array body."""
    items: list[Any] = []
    i = 0
    while True:
        start = segment.find("{", i)
        if start == -1:
            break
        end = _find_balanced(segment, start, "{", "}")
        if end is None:
            break
        try:
            items.append(_loads_object(sanitize_json_text(segment[start:end + 1])))
        except ValueError:
            pass
        i = end + 1

    if items:
        return items

    # Only take strings that were closed, so a truncated tail is dropped
    return [_decode_string(m) for m in re.findall(r'"((?:[^"\\]|\\.)*)"', segment, re.DOTALL)]


def _extract_field(text: str, spec: FieldSpec) -> tuple[bool, Any]:
    """Extract one top-level value. Returns (found, value)."""
    kind = spec.kind

    if kind == FieldKind.STRING:
        match = _key_pattern(spec.name, r'"((?:[^"\\]|\\.)*)"').search(text)
        return (True, _decode_string(match.group(1))) if match else (False, None)

    if kind in (FieldKind.NUMBER, FieldKind.INTEGER):
        match = _key_pattern(spec.name, r"(-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)").search(text)
        if not match:
            return False, None
        number = float(match.group(1))
        return True, int(number) if kind == FieldKind.INTEGER else number

    if kind == FieldKind.BOOLEAN:
        match = _key_pattern(spec.name, r"(true|false)").search(text)
        return (True, match.group(1) == "true") if match else (False, None)

    open_char, close_char = ("[", "]") if kind == FieldKind.ARRAY else ("{", "}")
    match = _key_pattern(spec.name, re.escape(open_char)).search(text)
    if not match:
        return False, None

    start = match.end() - 1
    end = _find_balanced(text, start, open_char, close_char)
    segment = text[start:end + 1] if end is not None else text[start:]

    if end is not None:
        try:
            return True, json.loads(sanitize_json_text(segment))
        except ValueError:
            pass

    if kind == FieldKind.ARRAY:
        return True, _split_array_items(segment[1:])
    return False, None


def _parse_field_level(text: str, fields: Sequence[FieldSpec]) -> tuple[dict[str, Any], tuple[str, ...]]:
    if not fields:
        raise ValueError("no field specs for field-level extraction")

    cleaned = _strip_wrappers(text)
    data: dict[str, Any] = {}
    recovered: list[str] = []

    for spec in fields:
        found, value = _extract_field(cleaned, spec)
        if found:
            data[spec.name] = value
            recovered.append(spec.name)
        else:
            data[spec.name] = spec.default_value()

    if not recovered:
        raise ValueError("no expected fields found")
    return data, tuple(recovered)


def default_record(fields: Sequence[FieldSpec]) -> dict[str, Any]:
    """Minimal safe record: every field at its neutral default."""
    return {spec.name: spec.default_value() for spec in fields}


# =============================================================================
# Public API
# =============================================================================

_WHOLE_OBJECT_STRATEGIES: list[tuple[RecoveryStrategy, Callable[[str, Sequence[FieldSpec]], dict]]] = [
    (RecoveryStrategy.DIRECT, _parse_direct),
    (RecoveryStrategy.SANITIZED, _parse_sanitized),
]


def extract_json_object(text: str | None, fields: Sequence[FieldSpec] = ()) -> ExtractionResult:
    """Recover a JSON object from model output.

    Never raises: when every parsing strategy fails the result is the
    default record with ``strategy == DEFAULT``.

    Args:
        text: Raw provider output.
        fields: Expected top-level keys, used by field-level recovery and
            to build the default record.

    Returns:
        ExtractionResult with the record, winning strategy and confidence.
    """
    failures: list[ParseFailure] = []
    text = text or ""

    if not text.strip():
        failures.append(ParseFailure(RecoveryStrategy.DIRECT, "empty response"))
    else:
        for strategy, parse in _WHOLE_OBJECT_STRATEGIES:
            try:
                data = parse(text, fields)
            except (ValueError, RecursionError) as e:
                failures.append(ParseFailure(strategy, str(e)))
                continue
            return ExtractionResult(
                data=data,
                strategy=strategy,
                confidence=STRATEGY_CONFIDENCE[strategy],
                failures=failures,
                recovered_fields=tuple(data.keys()),
            )

        try:
            data, recovered = _parse_field_level(text, fields)
        except (ValueError, RecursionError) as e:
            failures.append(ParseFailure(RecoveryStrategy.FIELD_LEVEL, str(e)))
        else:
            return ExtractionResult(
                data=data,
                strategy=RecoveryStrategy.FIELD_LEVEL,
                confidence=STRATEGY_CONFIDENCE[RecoveryStrategy.FIELD_LEVEL],
                failures=failures,
                recovered_fields=recovered,
            )

    return ExtractionResult(
        data=default_record(fields),
        strategy=RecoveryStrategy.DEFAULT,
        confidence=STRATEGY_CONFIDENCE[RecoveryStrategy.DEFAULT],
        failures=failures,
    )


def require_structured(
    text: str | None,
    fields: Sequence[FieldSpec] = (),
    required: Sequence[str] = (),
    accept_partial: bool = False,
) -> ExtractionResult:
    """Recover a record that must carry real structure.

    Args:
        text: Raw provider output.
        fields: Expected top-level keys.
        required: Keys that must be present (and recovered, for partial records).
        accept_partial: Allow field-level recovery when all required keys were found.

    Returns:
        ExtractionResult from a whole-object or accepted partial strategy.

    Raises:
        ParseError: If only a default record could be produced, a partial
            record was not allowed, or required keys are missing.
    """
    result = extract_json_object(text, fields)

    if result.is_default:
        raise ParseError(
            "Could not recover structured data from provider response",
            failures=result.failures,
        )

    if result.is_partial and not accept_partial:
        raise ParseError(
            "Provider response was only partially recoverable",
            failures=result.failures,
        )

    missing = [
        key for key in required
        if key not in result.recovered_fields or result.data.get(key) is None
    ]
    if missing:
        raise ParseError(
            f"Provider response missing required fields: {', '.join(missing)}",
            failures=result.failures,
        )

    return result
