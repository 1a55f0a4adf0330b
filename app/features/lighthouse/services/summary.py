import math
from typing import Any, Mapping, Optional

from app.features.lighthouse.schemas.lighthouse import (
    NOT_AVAILABLE,
    CategorySummary,
    ReportSummary,
)

METRIC_AUDITS = {
    "first_contentful_paint": "first-contentful-paint",
    "largest_contentful_paint": "largest-contentful-paint",
    "total_byte_weight": "total-byte-weight",
}

URL_FIELDS = ("finalUrl", "finalDisplayedUrl", "requestedUrl")


def to_percent(score: Any) -> Optional[int]:
    """Convert a 0..1 Lighthouse score to 0..100, rounding half up. Non-numbers and NaN/inf give None."""
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return None
    if not math.isfinite(score):
        return None
    return int(math.floor(score * 100 + 0.5))


def score_label(score: Optional[int]) -> Optional[str]:
    if score is None:
        return None
    if score >= 90:
        return "good"
    if score >= 50:
        return "medium"
    return "poor"


def _section(report: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = report.get(key)
    return value if isinstance(value, Mapping) else {}


def _display_value(audits: Mapping[str, Any], audit_id: str) -> str:
    audit = audits.get(audit_id)
    if not isinstance(audit, Mapping):
        return NOT_AVAILABLE
    value = audit.get("displayValue")
    return str(value) if value else NOT_AVAILABLE


def _resolved_url(report: Mapping[str, Any], requested_url: str) -> str:
    for key in URL_FIELDS:
        value = report.get(key)
        if isinstance(value, str) and value:
            return value
    return requested_url


def summarize_report(report: Mapping[str, Any], requested_url: str) -> ReportSummary:
    """
    Reduce a raw Lighthouse report to the handful of fields worth logging.

    Every lookup is independent: a missing category score, audit, or URL
    renders as N/A (or falls back to ``requested_url``) instead of failing
    the whole summary.
    """
    if not isinstance(report, Mapping):
        report = {}

    categories = []
    for name, data in _section(report, "categories").items():
        raw = data.get("score") if isinstance(data, Mapping) else None
        score = to_percent(raw)
        categories.append(CategorySummary(name=name, score=score, label=score_label(score)))

    audits = _section(report, "audits")
    metrics = {field: _display_value(audits, audit_id) for field, audit_id in METRIC_AUDITS.items()}

    return ReportSummary(
        url=_resolved_url(report, requested_url),
        categories=categories,
        **metrics,
    )
