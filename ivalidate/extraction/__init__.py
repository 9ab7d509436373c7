"""Structured-data recovery from generative-text output."""

from .json_recovery import (
    ExtractionResult,
    FieldKind,
    FieldSpec,
    ParseFailure,
    RecoveryStrategy,
    default_record,
    extract_json_object,
    require_structured,
    sanitize_json_text,
)

__all__ = [
    "ExtractionResult",
    "FieldKind",
    "FieldSpec",
    "ParseFailure",
    "RecoveryStrategy",
    "default_record",
    "extract_json_object",
    "require_structured",
    "sanitize_json_text",
]
