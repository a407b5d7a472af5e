"""Project risk scoring.

A project's score is the sum of independent heuristics over its budget and
schedule signals, clamped to 0-100 and mapped to a four-band level:

1. Budget vs progress: how far the share of budget spent runs ahead of the
   reported progress (one band at most).
2. Schedule: how far elapsed time runs ahead of progress (one band at most),
   plus a separate penalty when the end date has passed on an unfinished
   project.
3. Reserve: less than 10% of the budget left with more than 10% of the work
   remaining.

Every triggered rule is reported as a factor so the score can be explained,
and the factors drive a de-duplicated list of recommendations.
"""

from datetime import datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple, Optional, Sequence

from buildledger.database.base import Database
from buildledger.domain.entities import (
    Project,
    ProjectMetrics,
    ProjectStatus,
    RiskAssessment,
    RiskFactor,
    RiskLevel,
)
from buildledger.domain.errors import NotFoundError, project_not_found

MAX_SCORE = 100


class Band(NamedTuple):
    threshold: Decimal
    points: int
    name: str
    severity: RiskLevel


BUDGET_BANDS: tuple[Band, ...] = (
    Band(Decimal("30"), 50, "Budget Overrun", RiskLevel.CRITICAL),
    Band(Decimal("15"), 30, "Budget Warning", RiskLevel.HIGH),
    Band(Decimal("5"), 15, "Budget Concern", RiskLevel.MEDIUM),
)

SCHEDULE_BANDS: tuple[Band, ...] = (
    Band(Decimal("20"), 30, "Schedule Delay", RiskLevel.HIGH),
    Band(Decimal("10"), 15, "Schedule Risk", RiskLevel.MEDIUM),
)

OVERDUE_POINTS = 40
RESERVE_POINTS = 25
RESERVE_THRESHOLD = Decimal("10")
RESERVE_PROGRESS_CUTOFF = 90

ESCALATION_RECOMMENDATIONS = (
    "Schedule immediate project review meeting",
    "Identify cost-saving opportunities",
    "Consider reallocating resources",
)
BUDGET_RECOMMENDATIONS = (
    "Review and optimize material costs",
    "Negotiate better rates with suppliers",
)
SCHEDULE_RECOMMENDATIONS = (
    "Increase workforce or extend working hours",
    "Identify and remove project bottlenecks",
)
DEFAULT_RECOMMENDATIONS = (
    "Continue monitoring project metrics",
    "Maintain current project pace",
)


def coerce_progress(value) -> int:
    """Return progress as an int, treating missing or non-numeric values as 0."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def budget_used_percent(budget: Decimal, spent: Decimal) -> Optional[Decimal]:
    """Share of the budget already spent, or None when the budget is not positive."""
    if budget is None or budget <= 0:
        return None
    return spent / budget * 100


def match_band(gap, bands: Sequence[Band]) -> Optional[Band]:
    """Return the first band whose threshold the gap strictly exceeds."""
    for band in bands:
        if gap > band.threshold:
            return band
    return None


def risk_level_for(score: int) -> RiskLevel:
    """Map a score to its risk level."""
    if score >= 70:
        return RiskLevel.CRITICAL
    if score >= 40:
        return RiskLevel.HIGH
    if score >= 20:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def build_recommendations(level: RiskLevel, factors: Sequence[RiskFactor]) -> tuple[str, ...]:
    """Derive recommendations from the level and factors, first occurrence wins."""
    recommendations: list[str] = []
    if level in (RiskLevel.CRITICAL, RiskLevel.HIGH):
        recommendations.extend(ESCALATION_RECOMMENDATIONS)

    for factor in factors:
        if "Budget" in factor.name:
            recommendations.extend(BUDGET_RECOMMENDATIONS)
        if "Schedule" in factor.name:
            recommendations.extend(SCHEDULE_RECOMMENDATIONS)

    if not recommendations:
        recommendations.extend(DEFAULT_RECOMMENDATIONS)

    return tuple(dict.fromkeys(recommendations))


def _budget_factor(used_percent: Decimal, progress: int) -> Optional[tuple[int, RiskFactor]]:
    band = match_band(used_percent - progress, BUDGET_BANDS)
    if band is None:
        return None
    if band.name == "Budget Overrun":
        description = f"Spent {used_percent:.1f}% of budget but only {progress}% complete"
    elif band.name == "Budget Warning":
        description = f"Budget usage ({used_percent:.1f}%) exceeds progress ({progress}%)"
    else:
        description = "Budget usage slightly ahead of progress"
    return band.points, RiskFactor(name=band.name, severity=band.severity, description=description)


def _schedule_factors(project: Project, progress: int, now: datetime) -> list[tuple[int, RiskFactor]]:
    start = datetime.combine(project.start_date, time.min)
    end = datetime.combine(project.end_date, time.min)
    factors = []

    total_seconds = (end - start).total_seconds()
    if total_seconds > 0:
        time_progress = Decimal(str((now - start).total_seconds() / total_seconds * 100))
        band = match_band(time_progress - progress, SCHEDULE_BANDS)
        if band is not None:
            if band.name == "Schedule Delay":
                description = f"{time_progress:.1f}% of time elapsed but only {progress}% complete"
            else:
                description = "Project falling behind schedule"
            factors.append(
                (band.points, RiskFactor(name=band.name, severity=band.severity, description=description))
            )

    if now > end and project.status != ProjectStatus.COMPLETED:
        factors.append(
            (
                OVERDUE_POINTS,
                RiskFactor(
                    name="Overdue Project",
                    severity=RiskLevel.CRITICAL,
                    description="Project is past the deadline",
                ),
            )
        )
    return factors


def score_project(project: Project, now: Optional[datetime] = None) -> RiskAssessment:
    """Score a project's health.

    Args:
        project: Project to score
        now: Reference time for schedule rules (defaults to the current local time)

    Returns:
        RiskAssessment with the clamped score, level, factors, metrics and recommendations
    """
    if now is None:
        now = datetime.now()

    progress = coerce_progress(project.progress)
    budget = project.budget
    spent = project.spent if project.spent is not None else Decimal("0")
    used_percent = budget_used_percent(budget, spent)

    score = 0
    factors: list[RiskFactor] = []

    if used_percent is not None:
        budget_result = _budget_factor(used_percent, progress)
        if budget_result is not None:
            points, factor = budget_result
            score += points
            factors.append(factor)

    if project.start_date is not None and project.end_date is not None:
        for points, factor in _schedule_factors(project, progress, now):
            score += points
            factors.append(factor)

    remaining = budget - spent
    if used_percent is not None:
        remaining_percent = remaining / budget * 100
        if remaining_percent < RESERVE_THRESHOLD and progress < RESERVE_PROGRESS_CUTOFF:
            score += RESERVE_POINTS
            factors.append(
                RiskFactor(
                    name="Low Budget Reserve",
                    severity=RiskLevel.HIGH,
                    description=(
                        f"Only {remaining_percent:.1f}% of budget remaining "
                        f"with {100 - progress}% work left"
                    ),
                )
            )

    score = max(0, min(score, MAX_SCORE))
    level = risk_level_for(score)

    metrics = ProjectMetrics(
        budget=budget,
        spent=spent,
        remaining=remaining,
        budget_used_percent=(
            used_percent.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
            if used_percent is not None
            else None
        ),
        progress=progress,
        status=project.status,
    )

    return RiskAssessment(
        project_id=project.id,
        project_name=project.name,
        risk_score=score,
        risk_level=level,
        risk_factors=tuple(factors),
        metrics=metrics,
        recommendations=build_recommendations(level, factors),
    )


class RiskService:
    """Service resolving projects and scoring them."""

    def __init__(self, db: Database):
        """Initialize risk service.

        Args:
            db: Database instance
        """
        self.db = db

    def assess(self, project_id: int, now: Optional[datetime] = None) -> RiskAssessment:
        """Score a stored project.

        Raises:
            NotFoundError: If the project does not exist
        """
        project = self.db.get_project(project_id)
        if project is None:
            raise NotFoundError(project_not_found(project_id))
        return score_project(project, now=now)
