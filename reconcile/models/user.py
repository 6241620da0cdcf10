"""
User model.
"""
from typing import Optional

from sqlalchemy import Column, String, Text
from sqlmodel import Field

from .base import BaseModel


class User(BaseModel, table=True):
    """
    Account with an optional avatar reference.
    """
    __tablename__ = "User"

    email: str = Field(sa_column=Column("email", String(255), unique=True, nullable=False))
    name: str = Field(sa_column=Column("name", String(100), nullable=False))
    avatar: Optional[str] = Field(default=None, sa_column=Column("avatar", Text, nullable=True))
