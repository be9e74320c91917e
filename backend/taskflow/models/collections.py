from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel

from taskflow.core.time import utcnow


class EntityCollection(SQLModel, table=True):
    """One row per entity-store key holding the JSON-encoded collection."""

    __tablename__ = "entity_collections"

    key: str = Field(primary_key=True)
    payload: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow)
