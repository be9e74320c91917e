# ruff: noqa

from datetime import date, datetime, timedelta

from taskflow.core.config import Settings
from taskflow.db.repositories import InMemoryRepository
from taskflow.models.entities import Project, Task, Team, TeamMember
from taskflow.services import metrics
from taskflow.services.entity_store import EntitySnapshot, EntityStore

TODAY = date(2024, 3, 12)


def _member(id_: int, name: str, *, efficiency: int = 80, team: str | None = None) -> TeamMember:
    return TeamMember(id=id_, name=name, email=f"{name.lower()}@example.com", efficiency=efficiency, team=team)


def _project(id_: int, *, progress: int = 0, deadline: date = TODAY, **kwargs) -> Project:
    return Project(id=id_, name=kwargs.pop("name", f"Project {id_}"), progress=progress, deadline=deadline, **kwargs)


def _task(id_: int, project_id: int, *, progress: int = 0, status: str = "pending", **kwargs) -> Task:
    return Task(id=id_, title=f"Task {id_}", project_id=project_id, progress=progress, status=status, **kwargs)


def _fixture_snapshot() -> EntitySnapshot:
    return EntityStore(InMemoryRepository()).snapshot(today=TODAY)


def test_dashboard_stats_from_demo_data():
    stats = metrics.dashboard_stats(_fixture_snapshot(), today=TODAY)
    assert stats.total_team_members == 9
    assert stats.total_projects == 4
    assert stats.active_projects == 3
    assert stats.completed_projects == 1
    assert stats.total_tasks == 5
    assert stats.completed_tasks == 1
    assert stats.in_progress_tasks == 4
    assert stats.overdue_tasks == 1
    assert stats.overall_progress == 60
    assert stats.team_count == 4


def test_dashboard_stats_empty_snapshot_is_zeroed():
    stats = metrics.dashboard_stats(EntitySnapshot(), today=TODAY)
    assert stats.total_tasks == 0
    assert stats.overall_progress == 0
    assert stats.upcoming_deadlines == 0


def test_upcoming_deadlines_counts_active_projects_within_a_week():
    snapshot = EntitySnapshot(
        projects=[
            _project(1, deadline=TODAY + timedelta(days=3)),
            _project(2, deadline=TODAY + timedelta(days=7)),
            _project(3, deadline=TODAY + timedelta(days=8)),
            _project(4, deadline=TODAY + timedelta(days=2), status="completed"),
            _project(5, deadline=TODAY - timedelta(days=1)),
        ]
    )
    assert metrics.dashboard_stats(snapshot, today=TODAY).upcoming_deadlines == 2


def test_team_with_no_tasks_scores_on_efficiency_only():
    snapshot = EntitySnapshot(
        members=[_member(1, "Ada", efficiency=80), _member(2, "Bo", efficiency=80)],
        teams=[Team(id=1, name="Core", member_ids=[1, 2], lead_id=1)],
    )
    (row,) = metrics.team_performance(snapshot)
    assert row.total_tasks == 0
    assert row.task_completion_rate == 0
    assert row.member_efficiency == 80
    assert row.overall_performance == 24
    assert row.lead_name == "Ada"


def test_team_performance_weights_and_skills():
    snapshot = EntitySnapshot(
        members=[
            _member(1, "Ada", efficiency=90).model_copy(update={"skills": ["Go", "SQL", "Go"]}),
            _member(2, "Bo", efficiency=70).model_copy(
                update={"skills": ["SQL", "React", "CSS", "Figma", "Rust"]}
            ),
        ],
        teams=[Team(id=1, name="Core", member_ids=[1, 2, 99])],
        projects=[_project(1, progress=50, team_id=1)],
        tasks=[
            _task(1, 1, progress=100, status="completed", team_id=1),
            _task(2, 1, progress=10, status="in-progress", team_id=1),
        ],
    )
    (row,) = metrics.team_performance(snapshot)
    # 0.4 * 50 + 0.3 * 80 + 0.3 * 50
    assert row.overall_performance == 59
    assert row.member_count == 2
    assert row.skills == ["Go", "SQL", "React", "CSS", "Figma"]
    assert row.lead_name is None


def test_timeline_sorted_by_days_remaining_including_overdue():
    snapshot = EntitySnapshot(
        projects=[
            _project(1, deadline=TODAY + timedelta(days=10)),
            _project(2, deadline=TODAY - timedelta(days=5)),
            _project(3, deadline=TODAY + timedelta(days=2)),
        ]
    )
    timeline = metrics.project_timeline(snapshot, today=TODAY)
    assert [e.days_remaining for e in timeline] == [-5, 2, 10]
    assert [e.is_overdue for e in timeline] == [True, False, False]


def test_workload_sorted_descending_with_stable_ties():
    snapshot = EntitySnapshot(
        members=[_member(1, "Ada"), _member(2, "Bo"), _member(3, "Cy"), _member(4, "Di")],
        tasks=[
            _task(1, 1, assignee_id=1, progress=100, status="completed"),
            _task(2, 1, assignee_id=1, progress=40, status="in-progress"),
            _task(3, 1, assignee_id=3, progress=10, status="in-progress"),
        ],
    )
    rows = metrics.member_workload(snapshot, today=TODAY)
    assert [r.member_id for r in rows] == [3, 1, 2, 4]
    assert [r.workload_percentage for r in rows] == [100, 50, 0, 0]
    assert rows[1].efficiency == 50
    assert rows[2].efficiency == 80


def test_budget_utilization_per_project():
    analytics = metrics.budget_analytics(_fixture_snapshot())
    by_name = {row.name: row for row in analytics.budget_utilization}
    assert by_name["Mobile App v2"].utilization == 75
    assert by_name["Mobile App v2"].remaining == 12500
    assert analytics.total_budget == 145000


def test_budget_analytics_zero_budget_is_zero_utilization():
    snapshot = EntitySnapshot(projects=[_project(1, budget=0, spent=100)])
    analytics = metrics.budget_analytics(snapshot)
    assert analytics.overall_utilization == 0
    assert analytics.budget_utilization[0].utilization == 0


def test_health_past_deadline_takes_only_near_penalty():
    snapshot = EntitySnapshot(projects=[_project(1, progress=50, deadline=TODAY - timedelta(days=10))])
    health = metrics.project_health(snapshot, 1, today=TODAY)
    assert health.health_score == 40
    assert health.status == "critical"
    assert health.color == metrics.HEALTH_COLORS["critical"]


def test_health_urgent_deadline_penalty():
    snapshot = EntitySnapshot(projects=[_project(1, progress=79, deadline=TODAY + timedelta(days=3))])
    health = metrics.project_health(snapshot, 1, today=TODAY)
    assert health.health_score == 59
    assert health.status == "warning"


def test_health_score_is_clamped_to_range():
    tasks = [
        _task(i, 1, progress=10, status="in-progress", deadline=TODAY - timedelta(days=1))
        for i in range(1, 6)
    ]
    snapshot = EntitySnapshot(
        projects=[
            _project(1, progress=10, deadline=TODAY + timedelta(days=3)),
            _project(2, progress=100, deadline=TODAY + timedelta(days=90)),
        ],
        tasks=tasks,
    )
    low = metrics.project_health(snapshot, 1, today=TODAY)
    high = metrics.project_health(snapshot, 2, today=TODAY)
    assert low.overdue_tasks == 5
    assert low.health_score == 0
    assert high.health_score == 100
    assert high.status == "healthy"


def test_health_for_unknown_project_is_none():
    assert metrics.project_health(EntitySnapshot(), 42, today=TODAY) is None


def test_trends_with_empty_window_are_zeroed():
    old = datetime(2020, 1, 1)
    snapshot = EntitySnapshot(tasks=[_task(1, 1, created_at=old, updated_at=old)])
    trends = metrics.performance_trends(snapshot, 30, today=TODAY)
    assert trends.tasks_created == 0
    assert trends.completion_rate == 0
    assert trends.avg_actual_hours == 0.0


def test_trends_count_recent_tasks():
    recent = datetime(2024, 3, 1)
    snapshot = EntitySnapshot(
        tasks=[
            _task(1, 1, progress=100, status="completed", actual_hours=4, created_at=recent),
            _task(2, 1, progress=100, status="completed", actual_hours=5, created_at=recent),
            _task(3, 1, deadline=TODAY - timedelta(days=1), created_at=recent),
        ]
    )
    trends = metrics.performance_trends(snapshot, 30, today=TODAY)
    assert trends.tasks_created == 3
    assert trends.completion_rate == 67
    assert trends.overdue_rate == 33
    assert trends.avg_actual_hours == 4.5


def test_round_half_up():
    assert metrics.round_half_up(2.5) == 3
    assert metrics.round_half_up(66.5) == 67
    assert metrics.percentage(1, 0) == 0


def test_health_ten_days_late_counts_overdue_tasks_and_near_penalty():
    snapshot = EntitySnapshot(
        projects=[_project(1, progress=40, deadline=TODAY - timedelta(days=10))],
        tasks=[_task(1, 1, progress=30, status="in-progress", deadline=TODAY - timedelta(days=2))],
    )
    health = metrics.project_health(snapshot, 1, today=TODAY)
    assert health.health_score == 40 - 5 - 10


def test_overall_performance_weights_rounded_components():
    snapshot = EntitySnapshot(
        members=[_member(1, "Ada", efficiency=70), _member(2, "Bo", efficiency=71)],
        teams=[Team(id=1, name="Core", member_ids=[1, 2])],
        tasks=[_task(1, 1, progress=100, status="completed", team_id=1)]
        + [_task(i, 1, team_id=1) for i in range(2, 9)],
    )
    (row,) = metrics.team_performance(snapshot, today=TODAY)
    assert (row.task_completion_rate, row.member_efficiency, row.project_progress) == (13, 71, 0)
    # 0.4 * 13 + 0.3 * 71 = 26.5, not 0.4 * 12.5 + 0.3 * 70.5 = 26.15
    assert row.overall_performance == 27


def test_team_performance_task_breakdown_from_demo_data():
    rows = {row.name: row for row in metrics.team_performance(_fixture_snapshot(), today=TODAY)}
    engineering = rows["Engineering Team"]
    assert engineering.total_tasks == 3
    assert engineering.in_progress_tasks == 2
    assert engineering.overdue_tasks == 0
    assert engineering.project_count == 2
    assert engineering.active_projects == 1
    assert rows["QA Team"].overdue_tasks == 1


def test_timeline_counts_critical_tasks_and_team_size():
    timeline = {e.name: e for e in metrics.project_timeline(_fixture_snapshot(), today=TODAY)}
    assert timeline["Mobile App v2"].critical_tasks_count == 1
    assert timeline["Mobile App v2"].team_size == 3
    assert timeline["API Migration"].critical_tasks_count == 0
    assert timeline["API Migration"].team_size == 2


def test_workload_sums_hours_and_projects_involved():
    rows = {r.member_id: r for r in metrics.member_workload(_fixture_snapshot(), today=TODAY)}
    assert rows[1].estimated_hours == 24
    assert rows[1].actual_hours == 9
    assert rows[1].projects_involved == 2
    assert rows[9].estimated_hours == 0
    assert rows[9].projects_involved == 1


def test_projects_health_covers_every_project():
    snapshot = _fixture_snapshot()
    rows = metrics.projects_health(snapshot, today=TODAY)
    assert [r.project_id for r in rows] == [p.id for p in snapshot.projects]
    mobile = next(r for r in rows if r.name == "Mobile App v2")
    assert mobile.total_tasks == 2
    assert mobile.completed_tasks == 0
    assert mobile.completion_rate == 0
    assert metrics.projects_health(EntitySnapshot(), today=TODAY) == []


def test_resource_allocation_from_demo_data():
    rows = {r.name: r for r in metrics.resource_allocation(_fixture_snapshot())}
    engineering = rows["Engineering Team"]
    assert engineering.total_project_hours == 30
    assert engineering.total_member_capacity == 480
    assert engineering.utilization_rate == 6
    assert engineering.status == "underutilized"
    assert {p.name for p in engineering.projects} == {"Mobile App v2", "API Migration"}
    assert rows["QA Team"].project_count == 0
    assert rows["QA Team"].utilization_rate == 0


def test_resource_allocation_status_thresholds():
    snapshot = EntitySnapshot(
        members=[_member(1, "Ada"), _member(2, "Bo")],
        teams=[Team(id=1, name="Busy", member_ids=[1]), Team(id=2, name="Steady", member_ids=[2])],
        projects=[_project(1, team_id=1), _project(2, team_id=2)],
        tasks=[_task(1, 1, estimated_hours=150), _task(2, 2, estimated_hours=100)],
    )
    busy, steady = metrics.resource_allocation(snapshot)
    assert (busy.utilization_rate, busy.status) == (94, "overloaded")
    assert (steady.utilization_rate, steady.status) == (63, "optimal")


def test_resource_allocation_team_without_members_is_zeroed():
    snapshot = EntitySnapshot(
        teams=[Team(id=1, name="Empty")],
        projects=[_project(1, team_id=1)],
        tasks=[_task(1, 1, estimated_hours=8)],
    )
    (row,) = metrics.resource_allocation(snapshot)
    assert row.total_member_capacity == 0
    assert row.utilization_rate == 0


def test_metrics_config_reads_tier_bounds_from_settings():
    config = metrics.MetricsConfig.from_settings(
        Settings(health_critical_below=30, health_warning_below=40, health_moderate_below=95)
    )
    assert (config.critical_below, config.warning_below, config.moderate_below) == (30, 40, 95)
    assert metrics.health_tier(35, config) == "warning"
    assert metrics.health_tier(90, config) == "moderate"

    snapshot = EntitySnapshot(projects=[_project(1, progress=45, deadline=TODAY + timedelta(days=90))])
    assert metrics.project_health(snapshot, 1, today=TODAY, config=config).status == "moderate"
