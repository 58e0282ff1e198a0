"""Reduce a PageSpeed Insights payload to the few facts worth sending to the model.

Every lookup tolerates missing or mistyped optional fields: anything that is
not there is simply left out of the summary.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

METRIC_IDS = (
    "largest-contentful-paint",
    "total-blocking-time",
    "cumulative-layout-shift",
    "first-contentful-paint",
    "speed-index",
)


@dataclass
class Metric:
    title: str
    value: str


@dataclass
class Opportunity:
    title: str
    description: str
    savings: str


@dataclass
class Diagnostics:
    critical_request_chains: Optional[str] = None
    resource_summary: Optional[str] = None


@dataclass
class Summary:
    performance_score: Optional[int] = None
    metrics: list[Metric] = field(default_factory=list)
    opportunities: list[Opportunity] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def to_dict(self) -> dict[str, Any]:
        summary: dict[str, Any] = {}
        if self.performance_score is not None:
            summary["performance_score"] = self.performance_score

        diagnostics: dict[str, str] = {}
        if self.diagnostics.critical_request_chains is not None:
            diagnostics["critical_request_chains"] = self.diagnostics.critical_request_chains
        if self.diagnostics.resource_summary is not None:
            diagnostics["resource_summary"] = self.diagnostics.resource_summary

        return {
            "summary": summary,
            "metrics": [{"title": m.title, "value": m.value} for m in self.metrics],
            "opportunities": [
                {"title": o.title, "description": o.description, "savings": o.savings}
                for o in self.opportunities
            ],
            "diagnostics": diagnostics,
        }


def round_half_up(value: float) -> int:
    # round() does banker's rounding, which would turn a 0.5 score into 0.
    return int(Decimal(repr(float(value))).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _mapping(value: Any) -> Mapping:
    return value if isinstance(value, Mapping) else {}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _performance_score(lighthouse: Mapping) -> Optional[int]:
    categories = _mapping(lighthouse.get("categories"))
    score = _mapping(categories.get("performance")).get("score")
    if not _is_number(score):
        return None
    return round_half_up(score * 100)


def _metrics(audits: Mapping) -> list[Metric]:
    metrics: list[Metric] = []
    for metric_id in METRIC_IDS:
        audit = _mapping(audits.get(metric_id))
        title = _text(audit.get("title"))
        value = _text(audit.get("displayValue"))
        if title and value:
            metrics.append(Metric(title=title, value=value))
    return metrics


def _opportunities(audits: Mapping) -> list[Opportunity]:
    opportunities: list[Opportunity] = []
    for audit in audits.values():
        audit = _mapping(audit)
        details = _mapping(audit.get("details"))
        if details.get("type") != "opportunity":
            continue
        savings_ms = details.get("overallSavingsMs")
        if not _is_number(savings_ms) or savings_ms <= 0:
            continue
        opportunities.append(
            Opportunity(
                title=_text(audit.get("title")),
                description=_text(audit.get("description")),
                savings=_text(audit.get("displayValue")),
            )
        )
    return opportunities


def _critical_request_chains(audits: Mapping) -> Optional[str]:
    details = _mapping(_mapping(audits.get("critical-request-chains")).get("details"))
    chains = _mapping(details.get("chains"))
    candidates = [
        node
        for node in (_mapping(chain) for chain in chains.values())
        if _is_number(node.get("duration"))
    ]
    if not candidates:
        return None

    # Stable sort: equal durations keep the payload's order.
    longest = sorted(candidates, key=lambda node: node["duration"], reverse=True)[0]
    requests = len(_mapping(longest.get("children"))) + 1
    duration = round_half_up(longest["duration"])
    return f"Longest chain has {requests} requests and took {duration}ms"


def _resource_line(item: Mapping) -> str:
    label = item.get("label") or "Unknown"
    request_count = item.get("requestCount") if _is_number(item.get("requestCount")) else 0
    transfer_size = item.get("transferSize") if _is_number(item.get("transferSize")) else 0
    return f"- {label}: {request_count} requests, {round_half_up(transfer_size / 1024)} KB"


def _resource_summary(audits: Mapping) -> Optional[str]:
    details = _mapping(_mapping(audits.get("resource-summary")).get("details"))
    items = details.get("items")
    if not isinstance(items, list) or not items:
        return None
    return "\n".join(_resource_line(_mapping(item)) for item in items)


def summarize(payload: Mapping) -> Summary:
    if not isinstance(payload, Mapping):
        raise TypeError(f"PageSpeed payload must be a mapping, got {type(payload).__name__}")

    lighthouse = _mapping(payload.get("lighthouseResult"))
    audits = _mapping(lighthouse.get("audits"))

    return Summary(
        performance_score=_performance_score(lighthouse),
        metrics=_metrics(audits),
        opportunities=_opportunities(audits),
        diagnostics=Diagnostics(
            critical_request_chains=_critical_request_chains(audits),
            resource_summary=_resource_summary(audits),
        ),
    )
