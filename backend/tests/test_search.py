# ruff: noqa

from taskflow.db.repositories import InMemoryRepository
from taskflow.services.entity_store import EntityStore
from taskflow.services.search import search


def _snapshot():
    return EntityStore(InMemoryRepository()).snapshot()


def test_short_queries_return_nothing():
    snapshot = _snapshot()
    assert search(snapshot, "").total == 0
    assert search(snapshot, "a").total == 0
    assert search(snapshot, "   ").total == 0


def test_search_is_case_insensitive_across_collections():
    results = search(_snapshot(), "API")
    assert [p.name for p in results.projects] == ["API Migration"]
    assert [t.title for t in results.tasks] == ["Write API documentation"]
    # Skills are searched as well as names.
    assert [m.name for m in results.members] == ["Mikias Getachew"]


def test_search_matches_tags_and_team_names():
    results = search(_snapshot(), "design")
    assert "Design Team" in [t.name for t in results.teams]
    assert "Design homepage mockups" in [t.title for t in results.tasks]


def test_search_follows_lead_and_assignee_names():
    results = search(_snapshot(), "selamawit")
    assert [m.name for m in results.members] == ["Selamawit Assefa"]
    assert [t.name for t in results.teams] == ["Design Team"]
    assert [t.title for t in results.tasks] == ["Design homepage mockups"]


def test_search_matches_projects_by_team_name():
    results = search(_snapshot(), "engineering")
    assert [t.name for t in results.teams] == ["Engineering Team"]
    assert [p.name for p in results.projects] == ["Mobile App v2", "API Migration"]
    assert results.members == []


def test_search_ignores_dangling_references():
    snapshot = _snapshot()
    snapshot.tasks[0].assignee_id = 999
    results = search(snapshot, "tewodros")
    assert "Fix login authentication bug" not in [t.title for t in results.tasks]
    assert [t.title for t in results.tasks] == ["Mobile testing phase 2"]
