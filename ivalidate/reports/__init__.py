"""Evidence reports."""

from .evidence import build_evidence_report, format_evidence_report

__all__ = ["build_evidence_report", "format_evidence_report"]
