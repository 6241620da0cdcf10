"""
Base model shared by the target-schema tables.

The web application owns this schema; table and column names follow its
camelCase convention, Python attributes stay snake_case.
"""
import uuid
from datetime import datetime

from sqlalchemy import DateTime, JSON, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlmodel import Field, SQLModel

from reconcile.core.time_utils import utc_now


def StringArrayType():
    """Text array on PostgreSQL, JSON list on SQLite."""
    return ARRAY(Text).with_variant(JSON(), "sqlite")


def new_id() -> str:
    return str(uuid.uuid4())


class BaseModel(SQLModel):
    """
    Common columns: string UUID primary key and timestamps.
    """
    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"name": "createdAt", "nullable": False},
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"name": "updatedAt", "nullable": False, "onupdate": utc_now},
    )
