"""
SEOPulse Health Score

Weighted 0-100 site score:
- Critical issues: 40%
- Warning issues: 30%
- Notice issues: 20%
- Performance score: 10%

Each issue band is scored by tier on the ratio of issue groups to pages
crawled.
"""

import logging
import math

from app.services.audit_types import HealthScoreBreakdown, ScoreComponent

logger = logging.getLogger(__name__)


# (min ratio, score) pairs, highest ratio first. A zero ratio always scores 100.
CRITICAL_TIERS = [(0.50, 0), (0.25, 25), (0.10, 50), (0.05, 70), (0.0, 85)]
WARNING_TIERS = [(0.50, 30), (0.25, 50), (0.10, 70), (0.05, 85), (0.0, 95)]
NOTICE_TIERS = [(0.75, 50), (0.50, 70), (0.25, 85), (0.0, 95)]

# Percent weights
WEIGHTS = {
    "critical": 40,
    "warnings": 30,
    "notices": 20,
    "performance": 10,
}

GRADES = [
    (90, "excellent",
     "Site is well-optimized with minimal issues. Excellent SEO health.",
     "Maintain current optimization and continue monitoring. Focus on content quality and link building."),
    (75, "good",
     "Site is in good shape with minor issues to address. Good SEO health overall.",
     "Plan improvements for identified issues. Prioritize critical and warning issues first."),
    (50, "fair",
     "Site has multiple issues affecting rankings. Fair SEO health needs attention.",
     "Prioritize fixes for critical issues immediately. Schedule time to address warnings within 1-2 weeks."),
    (25, "poor",
     "Site has significant problems impacting search visibility. Poor SEO health.",
     "Urgent action needed. Fix all critical issues within 48 hours. Address warnings within 1 week."),
    (0, "critical",
     "Site has severe issues preventing proper indexing and ranking. Critical SEO health.",
     "IMMEDIATE ACTION REQUIRED. Fix critical issues TODAY. Site may not be indexable or rankable."),
]

# Average hours to fix one issue group
FIX_HOURS = {"critical": 2.0, "warning": 1.0, "notice": 0.5}


def _tier_score(count: int, total_pages: int, tiers: list[tuple[float, int]]) -> int:
    if total_pages <= 0 or count <= 0:
        return 100

    ratio = count / total_pages
    for threshold, score in tiers:
        if ratio >= threshold:
            return score
    return 100


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp(value, low=0, high=100):
    return max(low, min(high, value))


class HealthScorer:
    """Computes the weighted health score and its interpretation."""

    def critical_score(self, count: int, total_pages: int) -> int:
        return _tier_score(count, total_pages, CRITICAL_TIERS)

    def warning_score(self, count: int, total_pages: int) -> int:
        return _tier_score(count, total_pages, WARNING_TIERS)

    def notice_score(self, count: int, total_pages: int) -> int:
        return _tier_score(count, total_pages, NOTICE_TIERS)

    def score(
        self,
        critical_count: int,
        warning_count: int,
        notice_count: int,
        total_pages: int,
        performance_score: float | None = None,
    ) -> HealthScoreBreakdown:
        """
        Score a site from its issue group counts.

        Args:
            critical_count: Number of critical issue groups
            warning_count: Number of warning issue groups
            notice_count: Number of notice issue groups
            total_pages: Pages crawled
            performance_score: External 0-100 performance score; None counts as 0

        Returns:
            HealthScoreBreakdown with per-component contributions and grade
        """
        scores = {
            "critical": self.critical_score(critical_count, total_pages),
            "warnings": self.warning_score(warning_count, total_pages),
            "notices": self.notice_score(notice_count, total_pages),
            "performance": _clamp(performance_score or 0),
        }

        weighted_total = sum(scores[k] * WEIGHTS[k] for k in WEIGHTS)
        overall = _clamp(_round_half_up(weighted_total / 100))

        breakdown = {
            key: ScoreComponent(
                weight=WEIGHTS[key],
                score=scores[key],
                contribution=round(scores[key] * WEIGHTS[key] / 100, 2),
            )
            for key in WEIGHTS
        }

        grade, interpretation, action_required = self.interpret(overall)

        logger.debug(
            f"Health score {overall} ({grade}): critical={scores['critical']} "
            f"warnings={scores['warnings']} notices={scores['notices']} performance={scores['performance']}"
        )

        return HealthScoreBreakdown(
            overall_score=overall,
            critical_score=scores["critical"],
            warning_score=scores["warnings"],
            notice_score=scores["notices"],
            performance_score=scores["performance"],
            breakdown=breakdown,
            grade=grade,
            interpretation=interpretation,
            action_required=action_required,
        )

    def interpret(self, overall: int) -> tuple[str, str, str]:
        """Grade, interpretation and required action for an overall score."""
        for minimum, grade, interpretation, action in GRADES:
            if overall >= minimum:
                return grade, interpretation, action
        _, grade, interpretation, action = GRADES[-1]
        return grade, interpretation, action

    def estimate_traffic_impact(self, health: HealthScoreBreakdown) -> dict:
        """Estimate organic traffic upside of fixing the remaining issues."""
        current = health.overall_score
        potential_gain = 100 - current

        if potential_gain >= 50:
            message = "Fixing all issues could increase organic traffic by 50-100%+"
        elif potential_gain >= 30:
            message = "Fixing all issues could increase organic traffic by 30-50%"
        elif potential_gain >= 15:
            message = "Fixing all issues could increase organic traffic by 15-30%"
        elif potential_gain >= 5:
            message = "Fixing remaining issues could increase organic traffic by 5-15%"
        else:
            message = "Site is well-optimized. Continue monitoring and maintenance."

        return {
            "current_traffic_potential": current,
            "potential_gain": potential_gain,
            "estimated_improvement": message,
        }

    def get_fix_time_estimates(self, critical_count: int, warning_count: int, notice_count: int) -> dict:
        """Rough effort estimate per severity band and in total."""
        critical_hours = critical_count * FIX_HOURS["critical"]
        warning_hours = warning_count * FIX_HOURS["warning"]
        notice_hours = notice_count * FIX_HOURS["notice"]
        total_hours = critical_hours + warning_hours + notice_hours

        return {
            "critical_fix_time": format_fix_time(critical_hours),
            "warnings_fix_time": format_fix_time(warning_hours),
            "notices_fix_time": format_fix_time(notice_hours),
            "total_time": format_fix_time(total_hours),
        }


def format_fix_time(hours: float) -> str:
    if hours < 1:
        return f"{_round_half_up(hours * 60)} minutes"
    if hours < 8:
        return f"{_round_half_up(hours)} hours"
    days = _round_half_up(hours / 8)
    return f"{days} {'day' if days == 1 else 'days'}"
