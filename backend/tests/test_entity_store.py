# ruff: noqa

from datetime import date

import pytest

from taskflow.core.errors import NotFoundError
from taskflow.db.repositories import (
    InMemoryRepository,
    JsonFileRepository,
    SqlCollectionRepository,
    StorageError,
)
from taskflow.services.entity_store import EntityStore, progress_for_status


class FlakyRepository(InMemoryRepository):
    def __init__(self, initial=None):
        super().__init__(initial)
        self.broken = False

    def load(self, key):
        if self.broken:
            raise OSError("disk unavailable")
        return super().load(key)

    def save(self, key, items):
        if self.broken:
            raise OSError("disk unavailable")
        super().save(key, items)


def _store(initial=None, **kwargs) -> EntityStore:
    return EntityStore(InMemoryRepository(initial), **kwargs)


def test_absent_collections_are_seeded_with_demo_data():
    store = _store()
    assert len(store.get_team_members()) == 9
    assert [t.name for t in store.get_teams()][:2] == ["Engineering Team", "Design Team"]
    assert {p.name for p in store.get_projects()} >= {"Mobile App v2", "API Migration"}
    assert len(store.get_tasks()) == 5


def test_seeding_can_be_disabled():
    store = _store(seed=False)
    assert store.get_teams() == []
    assert store.get_tasks() == []


def test_undecodable_collection_degrades_to_empty_list():
    store = _store({"managerTasks": "{not json", "teams": {"id": 1}})
    assert store.get_tasks() == []
    assert store.get_teams() == []


def test_invalid_records_degrade_to_empty_list():
    store = _store({"managerProjects": [{"id": "not-a-number", "name": 3}]})
    assert store.get_projects() == []


def test_failing_medium_returns_last_known_good_collection():
    repo = FlakyRepository()
    store = EntityStore(repo)
    teams = store.get_teams()

    repo.broken = True
    assert store.get_teams() == teams


def test_write_failure_is_swallowed_and_kept_in_memory():
    repo = FlakyRepository()
    store = EntityStore(repo)
    store.get_team_members()

    repo.broken = True
    member = store.create_team_member({"name": "Hana", "email": "hana@company.com"})
    assert store.get_team_member(member.id) is not None


def test_save_after_get_is_a_no_op():
    store = _store()
    before = store.get_tasks()
    store.save_tasks(before)
    assert store.get_tasks() == before


def test_new_ids_are_greater_than_existing_ones():
    store = _store(clock_ms=lambda: 5)
    member = store.create_team_member({"name": "Hana", "email": "hana@company.com"})
    assert member.id == 10
    assert member.status == "active"


@pytest.mark.parametrize(
    ("progress", "status"),
    [(100, "completed"), (45, "in-progress"), (0, "pending")],
)
def test_created_task_status_follows_progress(progress, status):
    store = _store()
    task = store.create_task({"title": "Ship it", "project_id": 2, "progress": progress})
    assert task.status == status
    assert task.team_id == 2


def test_progress_update_derives_status_and_refreshes_project_summary():
    store = _store()
    task = store.update_task_progress(5, 100)
    assert task.status == "completed"
    project = store.get_project(1)
    assert project.tasks.total == 2
    assert project.tasks.completed == 1


def test_status_update_maps_to_progress():
    store = _store()
    assert store.update_task(4, {"status": "completed"}).progress == 100
    assert store.update_task(4, {"status": "pending"}).progress == 0
    assert store.update_task(4, {"status": "in-progress"}).progress == 50
    assert progress_for_status("in-progress", 30) == 30


def test_create_project_with_unknown_team_raises_not_found():
    store = _store()
    with pytest.raises(NotFoundError):
        store.create_project({"name": "Ghost", "deadline": date(2030, 1, 1), "team_id": 999})


def test_create_project_copies_team_members():
    store = _store()
    project = store.create_project({"name": "Docs", "deadline": date(2030, 1, 1), "team_id": 2})
    assert project.team_member_ids == [2, 7]
    assert project.status == "active"
    assert project.tasks.total == 0


def test_create_task_with_unknown_project_or_assignee_raises_not_found():
    store = _store()
    with pytest.raises(NotFoundError):
        store.create_task({"title": "Orphan", "project_id": 999})
    with pytest.raises(NotFoundError, match="Team member not found: 999"):
        store.create_task({"title": "Nobody", "project_id": 1, "assignee_id": 999})


def test_delete_project_removes_its_tasks():
    store = _store()
    store.delete_project(1)
    assert store.get_project(1) is None
    assert all(t.project_id != 1 for t in store.get_tasks())
    assert len(store.get_tasks()) == 3


def test_delete_team_unlinks_members_and_projects():
    store = _store()
    store.delete_team(4)
    assert store.get_team(4) is None
    assert store.get_team_member(5).team is None
    assert store.get_project(4).team_id is None


def test_add_member_to_team_moves_member_out_of_previous_team():
    store = _store()
    team = store.add_member_to_team(2, 6)
    assert 6 in team.member_ids
    assert 6 not in store.get_team(1).member_ids
    assert store.get_team_member(6).team == "Design Team"


def test_removing_team_lead_clears_lead():
    store = _store()
    team = store.remove_member_from_team(1, 1)
    assert team.lead_id is None
    assert store.team_lead(team) is None


def test_comments_are_appended():
    store = _store()
    store.add_task_comment(1, author="Tewodros", text="First pass done")
    task = store.add_task_comment(1, author="Mikias", text="Reviewed")
    assert [c.author for c in task.comments] == ["Tewodros", "Mikias"]


def test_json_file_repository_persists_between_stores(tmp_path):
    first = EntityStore(JsonFileRepository(tmp_path))
    created = first.create_team({"name": "Data Team", "member_ids": [4]})
    assert (tmp_path / "teams.json").exists()

    second = EntityStore(JsonFileRepository(tmp_path), seed=False)
    assert second.get_team(created.id).name == "Data Team"
    assert second.get_team_member(4).team == "Data Team"


def test_json_file_repository_corrupt_file_degrades(tmp_path):
    (tmp_path / "managerTasks.json").write_text("[{broken", encoding="utf-8")
    store = EntityStore(JsonFileRepository(tmp_path))
    assert store.get_tasks() == []


def test_json_file_repository_non_utf8_file_degrades(tmp_path):
    (tmp_path / "managerTasks.json").write_bytes(b"[\xff\xfe]")
    repo = JsonFileRepository(tmp_path)
    with pytest.raises(StorageError):
        repo.load("managerTasks")

    store = EntityStore(repo)
    assert store.get_tasks() == []


def test_sql_repository_round_trip(engine):
    store = EntityStore(SqlCollectionRepository(engine))
    store.update_task_progress(2, 100)

    reloaded = EntityStore(SqlCollectionRepository(engine), seed=False)
    assert reloaded.get_task(2).status == "completed"
    assert reloaded.get_project(2).tasks.completed == 1


@pytest.mark.parametrize(
    ("progress", "status"),
    [(100, "completed"), (45, "in-progress"), (0, "pending"), (130, "completed")],
)
def test_update_task_progress_derives_status(progress, status):
    store = _store()
    task = store.update_task_progress(1, progress)
    assert task.status == status
    assert 0 <= task.progress <= 100
