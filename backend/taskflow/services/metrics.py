"""Derived analytics over an entity snapshot.

Every function here is pure: it reads the snapshot it is handed, recomputes
from scratch and never mutates it. Degenerate input (no tasks, no members,
zero budget) yields zeroed metrics rather than an error. Percentages are
rounded half-up to the nearest integer.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

from taskflow.core.config import Settings
from taskflow.core.time import utctoday
from taskflow.models.entities import (
    MEMBER_ACTIVE,
    PROJECT_ACTIVE,
    PROJECT_COMPLETED,
    PRIORITY_HIGH,
    TASK_COMPLETED,
    TASK_IN_PROGRESS,
    Project,
    clamp_progress,
)
from taskflow.services.entity_store import EntitySnapshot

HEALTH_CRITICAL = "critical"
HEALTH_WARNING = "warning"
HEALTH_MODERATE = "moderate"
HEALTH_HEALTHY = "healthy"

ALLOCATION_OVERLOADED = "overloaded"
ALLOCATION_OPTIMAL = "optimal"
ALLOCATION_UNDERUTILIZED = "underutilized"

HEALTH_COLORS = {
    HEALTH_CRITICAL: "#EF4444",
    HEALTH_WARNING: "#F97316",
    HEALTH_MODERATE: "#EAB308",
    HEALTH_HEALTHY: "#22C55E",
}

SKILL_SAMPLE_SIZE = 5


@dataclass(frozen=True, slots=True)
class MetricsConfig:
    """Tuning constants for scoring; none of them is a hard contract."""

    weight_task_completion: float = 0.4
    weight_member_efficiency: float = 0.3
    weight_project_progress: float = 0.3

    overdue_task_penalty: int = 5
    urgent_days: int = 7
    urgent_progress: int = 80
    urgent_penalty: int = 20
    near_days: int = 14
    near_progress: int = 60
    near_penalty: int = 10

    critical_below: int = 50
    warning_below: int = 70
    moderate_below: int = 85

    upcoming_deadline_days: int = 7

    # 8h x 5 days x 4 weeks
    capacity_hours_per_member: int = 160
    overloaded_above: int = 90
    underutilized_below: int = 60

    @classmethod
    def from_settings(cls, settings: Settings) -> MetricsConfig:
        return cls(
            weight_task_completion=settings.weight_task_completion,
            weight_member_efficiency=settings.weight_member_efficiency,
            weight_project_progress=settings.weight_project_progress,
            overdue_task_penalty=settings.health_overdue_task_penalty,
            urgent_days=settings.health_urgent_days,
            urgent_progress=settings.health_urgent_progress,
            urgent_penalty=settings.health_urgent_penalty,
            near_days=settings.health_near_days,
            near_progress=settings.health_near_progress,
            near_penalty=settings.health_near_penalty,
            critical_below=settings.health_critical_below,
            warning_below=settings.health_warning_below,
            moderate_below=settings.health_moderate_below,
            upcoming_deadline_days=settings.upcoming_deadline_days,
            capacity_hours_per_member=settings.capacity_hours_per_member,
            overloaded_above=settings.allocation_overloaded_above,
            underutilized_below=settings.allocation_underutilized_below,
        )


DEFAULT_METRICS_CONFIG = MetricsConfig()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(part: float, whole: float) -> int:
    if not whole:
        return 0
    return round_half_up(part / whole * 100)


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def days_until(deadline: date, today: date) -> int:
    return (deadline - today).days


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DashboardStats:
    total_team_members: int
    active_members: int
    total_projects: int
    active_projects: int
    completed_projects: int
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    overdue_tasks: int
    team_count: int
    overall_progress: int
    upcoming_deadlines: int


@dataclass(frozen=True, slots=True)
class TeamPerformance:
    team_id: int
    name: str
    lead_id: int | None
    lead_name: str | None
    member_count: int
    project_count: int
    active_projects: int
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    overdue_tasks: int
    task_completion_rate: int
    member_efficiency: int
    project_progress: int
    overall_performance: int
    skills: list[str]
    color: str


@dataclass(frozen=True, slots=True)
class TimelineEntry:
    project_id: int
    name: str
    status: str
    progress: int
    start_date: date | None
    deadline: date
    days_remaining: int
    is_overdue: bool
    critical_tasks_count: int
    team_size: int


@dataclass(frozen=True, slots=True)
class MemberWorkload:
    member_id: int
    name: str
    role: str
    team: str | None
    total_tasks: int
    completed_tasks: int
    active_tasks: int
    overdue_tasks: int
    projects_involved: int
    estimated_hours: float
    actual_hours: float
    efficiency: int
    workload_percentage: int


@dataclass(frozen=True, slots=True)
class ProjectBudget:
    project_id: int
    name: str
    status: str
    budget: float
    spent: float
    remaining: float
    utilization: int


@dataclass(frozen=True, slots=True)
class BudgetAnalytics:
    total_budget: float
    total_spent: float
    total_remaining: float
    overall_utilization: int
    avg_utilization: int
    budget_utilization: list[ProjectBudget]
    over_budget: list[ProjectBudget]
    under_budget: list[ProjectBudget]


@dataclass(frozen=True, slots=True)
class ProjectHealth:
    project_id: int
    name: str
    progress: int
    days_remaining: int
    overdue_tasks: int
    completed_tasks: int
    total_tasks: int
    completion_rate: int
    health_score: int
    status: str
    color: str


@dataclass(frozen=True, slots=True)
class PerformanceTrends:
    window_days: int
    tasks_created: int
    tasks_completed: int
    tasks_overdue: int
    completion_rate: int
    overdue_rate: int
    avg_actual_hours: float
    projects_created: int
    projects_completed: int


@dataclass(frozen=True, slots=True)
class AllocatedProject:
    project_id: int
    name: str
    progress: int


@dataclass(frozen=True, slots=True)
class ResourceAllocation:
    team_id: int
    name: str
    member_count: int
    project_count: int
    total_project_hours: float
    total_member_capacity: int
    utilization_rate: int
    status: str
    projects: list[AllocatedProject]


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def dashboard_stats(
    snapshot: EntitySnapshot,
    *,
    today: date | None = None,
    config: MetricsConfig = DEFAULT_METRICS_CONFIG,
) -> DashboardStats:
    today = today or utctoday()
    active = [p for p in snapshot.projects if p.status == PROJECT_ACTIVE]
    horizon = today + timedelta(days=config.upcoming_deadline_days)

    return DashboardStats(
        total_team_members=len(snapshot.members),
        active_members=sum(1 for m in snapshot.members if m.status == MEMBER_ACTIVE),
        total_projects=len(snapshot.projects),
        active_projects=len(active),
        completed_projects=sum(1 for p in snapshot.projects if p.status == PROJECT_COMPLETED),
        total_tasks=len(snapshot.tasks),
        completed_tasks=sum(1 for t in snapshot.tasks if t.status == TASK_COMPLETED),
        in_progress_tasks=sum(
            1 for t in snapshot.tasks if 0 < clamp_progress(t.progress) < 100
        ),
        overdue_tasks=sum(1 for t in snapshot.tasks if t.is_overdue(today)),
        team_count=len(snapshot.teams),
        overall_progress=round_half_up(_mean(clamp_progress(p.progress) for p in active)),
        upcoming_deadlines=sum(1 for p in active if today <= p.deadline <= horizon),
    )


def team_performance(
    snapshot: EntitySnapshot,
    *,
    today: date | None = None,
    config: MetricsConfig = DEFAULT_METRICS_CONFIG,
) -> list[TeamPerformance]:
    """Per-team scores; the overall score weights the already rounded components."""
    today = today or utctoday()
    results: list[TeamPerformance] = []
    for team in snapshot.teams:
        members = [m for mid in team.member_ids if (m := snapshot.member(mid)) is not None]
        tasks = [t for t in snapshot.tasks if t.team_id == team.id]
        projects = [p for p in snapshot.projects if p.team_id == team.id]

        completed = sum(1 for t in tasks if t.status == TASK_COMPLETED)
        completion_rate = percentage(completed, len(tasks))
        efficiency = round_half_up(_mean(m.efficiency for m in members))
        progress = round_half_up(_mean(clamp_progress(p.progress) for p in projects))
        overall = (
            config.weight_task_completion * completion_rate
            + config.weight_member_efficiency * efficiency
            + config.weight_project_progress * progress
        )

        skills = list(dict.fromkeys(skill for m in members for skill in m.skills))
        lead = snapshot.member(team.lead_id)
        results.append(
            TeamPerformance(
                team_id=team.id,
                name=team.name,
                lead_id=team.lead_id,
                lead_name=lead.name if lead else None,
                member_count=len(members),
                project_count=len(projects),
                active_projects=sum(1 for p in projects if p.status == PROJECT_ACTIVE),
                total_tasks=len(tasks),
                completed_tasks=completed,
                in_progress_tasks=sum(1 for t in tasks if t.status == TASK_IN_PROGRESS),
                overdue_tasks=sum(1 for t in tasks if t.is_overdue(today)),
                task_completion_rate=completion_rate,
                member_efficiency=efficiency,
                project_progress=progress,
                overall_performance=round_half_up(overall),
                skills=skills[:SKILL_SAMPLE_SIZE],
                color=team.color,
            )
        )
    return results


def project_timeline(
    snapshot: EntitySnapshot, *, today: date | None = None
) -> list[TimelineEntry]:
    """Projects ordered by days remaining, most overdue first."""
    today = today or utctoday()
    entries = [
        TimelineEntry(
            project_id=p.id,
            name=p.name,
            status=p.status,
            progress=clamp_progress(p.progress),
            start_date=p.start_date,
            deadline=p.deadline,
            days_remaining=days_until(p.deadline, today),
            is_overdue=p.deadline < today and p.status != PROJECT_COMPLETED,
            critical_tasks_count=sum(
                1
                for t in snapshot.tasks
                if t.project_id == p.id
                and t.priority == PRIORITY_HIGH
                and t.status != TASK_COMPLETED
            ),
            team_size=sum(1 for m in snapshot.members if m.id in p.team_member_ids),
        )
        for p in snapshot.projects
    ]
    return sorted(entries, key=lambda e: e.days_remaining)


def member_workload(
    snapshot: EntitySnapshot, *, today: date | None = None
) -> list[MemberWorkload]:
    """Per-member task load, heaviest first; ties keep member order."""
    today = today or utctoday()
    rows: list[MemberWorkload] = []
    for member in snapshot.members:
        tasks = [t for t in snapshot.tasks if t.assignee_id == member.id]
        completed = sum(1 for t in tasks if t.status == TASK_COMPLETED)
        active = len(tasks) - completed
        efficiency = percentage(completed, len(tasks)) if tasks else member.efficiency
        rows.append(
            MemberWorkload(
                member_id=member.id,
                name=member.name,
                role=member.role,
                team=member.team,
                total_tasks=len(tasks),
                completed_tasks=completed,
                active_tasks=active,
                overdue_tasks=sum(1 for t in tasks if t.is_overdue(today)),
                projects_involved=sum(
                    1 for p in snapshot.projects if member.id in p.team_member_ids
                ),
                estimated_hours=sum(t.estimated_hours for t in tasks),
                actual_hours=sum(t.actual_hours for t in tasks),
                efficiency=efficiency,
                workload_percentage=percentage(active, len(tasks)),
            )
        )
    return sorted(rows, key=lambda r: r.workload_percentage, reverse=True)


def _project_budget(project: Project) -> ProjectBudget:
    return ProjectBudget(
        project_id=project.id,
        name=project.name,
        status=project.status,
        budget=project.budget,
        spent=project.spent,
        remaining=project.budget - project.spent,
        utilization=percentage(project.spent, project.budget),
    )


def budget_analytics(snapshot: EntitySnapshot) -> BudgetAnalytics:
    total_budget = sum(p.budget for p in snapshot.projects)
    total_spent = sum(p.spent for p in snapshot.projects)
    entries = [_project_budget(p) for p in snapshot.projects]
    active = [e for e in entries if e.status == PROJECT_ACTIVE]

    return BudgetAnalytics(
        total_budget=total_budget,
        total_spent=total_spent,
        total_remaining=total_budget - total_spent,
        overall_utilization=percentage(total_spent, total_budget),
        avg_utilization=round_half_up(_mean(e.utilization for e in active)),
        budget_utilization=entries,
        over_budget=[e for e in active if e.utilization > 100],
        under_budget=[e for e in active if e.utilization < 80],
    )


def health_tier(score: int, config: MetricsConfig = DEFAULT_METRICS_CONFIG) -> str:
    if score < config.critical_below:
        return HEALTH_CRITICAL
    if score < config.warning_below:
        return HEALTH_WARNING
    if score < config.moderate_below:
        return HEALTH_MODERATE
    return HEALTH_HEALTHY


def project_health(
    snapshot: EntitySnapshot,
    project_id: int,
    *,
    today: date | None = None,
    config: MetricsConfig = DEFAULT_METRICS_CONFIG,
) -> ProjectHealth | None:
    project = snapshot.project(project_id)
    if project is None:
        return None
    today = today or utctoday()

    progress = clamp_progress(project.progress)
    tasks = [t for t in snapshot.tasks if t.project_id == project.id]
    completed = sum(1 for t in tasks if t.status == TASK_COMPLETED)
    overdue = sum(1 for t in tasks if t.is_overdue(today))
    remaining = days_until(project.deadline, today)

    score = progress - config.overdue_task_penalty * overdue
    # The urgent window only covers deadlines still ahead; past-due projects
    # fall through to the wider window.
    if 0 <= remaining < config.urgent_days and progress < config.urgent_progress:
        score -= config.urgent_penalty
    elif remaining < config.near_days and progress < config.near_progress:
        score -= config.near_penalty
    score = max(0, min(100, score))

    tier = health_tier(score, config)
    return ProjectHealth(
        project_id=project.id,
        name=project.name,
        progress=progress,
        days_remaining=remaining,
        overdue_tasks=overdue,
        completed_tasks=completed,
        total_tasks=len(tasks),
        completion_rate=percentage(completed, len(tasks)),
        health_score=score,
        status=tier,
        color=HEALTH_COLORS[tier],
    )


def projects_health(
    snapshot: EntitySnapshot,
    *,
    today: date | None = None,
    config: MetricsConfig = DEFAULT_METRICS_CONFIG,
) -> list[ProjectHealth]:
    today = today or utctoday()
    results = (
        project_health(snapshot, p.id, today=today, config=config) for p in snapshot.projects
    )
    return [r for r in results if r is not None]


def allocation_status(utilization: int, config: MetricsConfig = DEFAULT_METRICS_CONFIG) -> str:
    if utilization > config.overloaded_above:
        return ALLOCATION_OVERLOADED
    if utilization < config.underutilized_below:
        return ALLOCATION_UNDERUTILIZED
    return ALLOCATION_OPTIMAL


def resource_allocation(
    snapshot: EntitySnapshot,
    *,
    config: MetricsConfig = DEFAULT_METRICS_CONFIG,
) -> list[ResourceAllocation]:
    """Estimated hours of each team's project tasks against monthly member capacity."""
    rows: list[ResourceAllocation] = []
    for team in snapshot.teams:
        members = [m for mid in team.member_ids if (m := snapshot.member(mid)) is not None]
        projects = [p for p in snapshot.projects if p.team_id == team.id]
        project_ids = {p.id for p in projects}

        hours = sum(t.estimated_hours for t in snapshot.tasks if t.project_id in project_ids)
        capacity = len(members) * config.capacity_hours_per_member
        utilization = percentage(hours, capacity)
        rows.append(
            ResourceAllocation(
                team_id=team.id,
                name=team.name,
                member_count=len(members),
                project_count=len(projects),
                total_project_hours=hours,
                total_member_capacity=capacity,
                utilization_rate=utilization,
                status=allocation_status(utilization, config),
                projects=[
                    AllocatedProject(
                        project_id=p.id, name=p.name, progress=clamp_progress(p.progress)
                    )
                    for p in projects
                ],
            )
        )
    return rows


def performance_trends(
    snapshot: EntitySnapshot,
    window_days: int = 30,
    *,
    today: date | None = None,
) -> PerformanceTrends:
    today = today or utctoday()
    since = today - timedelta(days=window_days)

    tasks = [t for t in snapshot.tasks if t.created_at.date() >= since]
    projects = [p for p in snapshot.projects if p.created_at.date() >= since]
    completed = [t for t in tasks if t.status == TASK_COMPLETED]
    overdue = sum(1 for t in tasks if t.is_overdue(today))

    return PerformanceTrends(
        window_days=window_days,
        tasks_created=len(tasks),
        tasks_completed=len(completed),
        tasks_overdue=overdue,
        completion_rate=percentage(len(completed), len(tasks)),
        overdue_rate=percentage(overdue, len(tasks)),
        avg_actual_hours=round(_mean(t.actual_hours for t in completed), 1),
        projects_created=len(projects),
        projects_completed=sum(1 for p in projects if p.status == PROJECT_COMPLETED),
    )
