"""Domain errors raised below the API layer.

The exception handlers registered in ``taskflow.main`` translate these into
HTTP responses so the store and services stay free of HTTP concerns.
"""

from __future__ import annotations


class TaskFlowError(Exception):
    pass


class NotFoundError(TaskFlowError):
    """A referenced member, team, project or task does not exist."""

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")


class ForbiddenError(TaskFlowError):
    """The caller's role or ownership does not allow the mutation."""
