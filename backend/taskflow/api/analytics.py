"""Read-only dashboard analytics over the current entity snapshot."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from taskflow.api.deps import ACTOR_DEP, METRICS_CONFIG_DEP, STORE_DEP, ActorContext
from taskflow.services import metrics
from taskflow.services.entity_store import EntityStore
from taskflow.services.search import SearchResults, search

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/dashboard", response_model=metrics.DashboardStats)
def get_dashboard_stats(
    store: EntityStore = STORE_DEP,
    config: metrics.MetricsConfig = METRICS_CONFIG_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> metrics.DashboardStats:
    return metrics.dashboard_stats(store.snapshot(), config=config)


@router.get("/teams", response_model=list[metrics.TeamPerformance])
def get_team_performance(
    store: EntityStore = STORE_DEP,
    config: metrics.MetricsConfig = METRICS_CONFIG_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> list[metrics.TeamPerformance]:
    return metrics.team_performance(store.snapshot(), config=config)


@router.get("/resources", response_model=list[metrics.ResourceAllocation])
def get_resource_allocation(
    store: EntityStore = STORE_DEP,
    config: metrics.MetricsConfig = METRICS_CONFIG_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> list[metrics.ResourceAllocation]:
    return metrics.resource_allocation(store.snapshot(), config=config)


@router.get("/timeline", response_model=list[metrics.TimelineEntry])
def get_project_timeline(
    store: EntityStore = STORE_DEP, actor: ActorContext = ACTOR_DEP
) -> list[metrics.TimelineEntry]:
    return metrics.project_timeline(store.snapshot())


@router.get("/workload", response_model=list[metrics.MemberWorkload])
def get_member_workload(
    store: EntityStore = STORE_DEP, actor: ActorContext = ACTOR_DEP
) -> list[metrics.MemberWorkload]:
    return metrics.member_workload(store.snapshot())


@router.get("/budget", response_model=metrics.BudgetAnalytics)
def get_budget_analytics(
    store: EntityStore = STORE_DEP, actor: ActorContext = ACTOR_DEP
) -> metrics.BudgetAnalytics:
    return metrics.budget_analytics(store.snapshot())


@router.get("/trends", response_model=metrics.PerformanceTrends)
def get_performance_trends(
    window_days: int = Query(default=30, ge=1, le=365),
    store: EntityStore = STORE_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> metrics.PerformanceTrends:
    return metrics.performance_trends(store.snapshot(), window_days)


@router.get("/health", response_model=list[metrics.ProjectHealth])
def get_projects_health(
    store: EntityStore = STORE_DEP,
    config: metrics.MetricsConfig = METRICS_CONFIG_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> list[metrics.ProjectHealth]:
    return metrics.projects_health(store.snapshot(), config=config)


@router.get("/projects/{project_id}/health", response_model=metrics.ProjectHealth)
def get_project_health(
    project_id: int,
    store: EntityStore = STORE_DEP,
    config: metrics.MetricsConfig = METRICS_CONFIG_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> metrics.ProjectHealth:
    health = metrics.project_health(store.snapshot(), project_id, config=config)
    if health is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return health


@router.get("/search", response_model=SearchResults)
def search_entities(
    q: str = Query(default=""),
    store: EntityStore = STORE_DEP,
    actor: ActorContext = ACTOR_DEP,
) -> SearchResults:
    return search(store.snapshot(), q)
