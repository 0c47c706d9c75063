import math
from typing import Any, Dict, List

from app.features.reports.schemas.report import ReportSummary

IMPACT_WEIGHTS = {
    "critical": 4,
    "serious": 3,
    "moderate": 2,
    "minor": 1,
}

# Each contributing rule can cost at most ten weighted nodes' worth.
NODES_PER_RULE_CEILING = 10


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_accessibility_score(violations: List[Dict[str, Any]]) -> int:
    """
    Score 0-100 from axe-core violations.

    Each violation with a known impact adds (affected nodes x weight) to the
    weighted total and (10 x weight) to the denominator. No contributing
    violation means a perfect 100.
    """
    total_weighted = 0
    total_possible = 0

    for violation in violations:
        weight = IMPACT_WEIGHTS.get(violation.get("impact") or "")
        if not weight:
            continue
        total_weighted += len(violation.get("nodes") or []) * weight
        total_possible += NODES_PER_RULE_CEILING * weight

    if total_possible == 0:
        return 100

    raw = 100 - (total_weighted / total_possible) * 100
    return max(0, min(100, _round_half_up(raw)))


def summarize(axe_results: Dict[str, List[Dict[str, Any]]]) -> ReportSummary:
    violations = axe_results.get("violations", [])
    return ReportSummary(
        violations=len(violations),
        passes=len(axe_results.get("passes", [])),
        incomplete=len(axe_results.get("incomplete", [])),
        inapplicable=len(axe_results.get("inapplicable", [])),
        accessibility_score=calculate_accessibility_score(violations),
    )
