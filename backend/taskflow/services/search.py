from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from taskflow.models.entities import Project, Task, Team, TeamMember
from taskflow.services.entity_store import EntitySnapshot

MIN_QUERY_LENGTH = 2


@dataclass(frozen=True, slots=True)
class SearchResults:
    members: list[TeamMember] = field(default_factory=list)
    teams: list[Team] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.members) + len(self.teams) + len(self.projects) + len(self.tasks)


def _matches(query: str, fields: Iterable[str | None]) -> bool:
    return any(query in value.lower() for value in fields if value)


def _name(record: TeamMember | Team | None) -> str | None:
    return record.name if record is not None else None


def search(snapshot: EntitySnapshot, query: str) -> SearchResults:
    q = (query or "").strip().lower()
    if len(q) < MIN_QUERY_LENGTH:
        return SearchResults()

    return SearchResults(
        members=[
            m for m in snapshot.members if _matches(q, [m.name, m.email, m.role, *m.skills])
        ],
        teams=[
            t
            for t in snapshot.teams
            if _matches(q, [t.name, t.description, _name(snapshot.member(t.lead_id))])
        ],
        projects=[
            p
            for p in snapshot.projects
            if _matches(q, [p.name, p.description, _name(snapshot.team(p.team_id))])
        ],
        tasks=[
            t
            for t in snapshot.tasks
            if _matches(
                q, [t.title, t.description, _name(snapshot.member(t.assignee_id)), *t.tags]
            )
        ],
    )
