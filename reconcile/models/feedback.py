"""
Feedback model.
"""
from typing import Optional

from sqlalchemy import Column, ForeignKey, String, Text
from sqlmodel import Field

from .base import BaseModel


class Feedback(BaseModel, table=True):
    """
    User-submitted feedback with an optional attachment reference.
    """
    __tablename__ = "Feedback"

    message: str = Field(sa_column=Column("message", Text, nullable=False))
    attachment: Optional[str] = Field(
        default=None,
        sa_column=Column("attachment", Text, nullable=True),
    )
    user_id: Optional[str] = Field(
        default=None,
        sa_column=Column("userId", String(36), ForeignKey("User.id", ondelete="SET NULL"), nullable=True),
    )
