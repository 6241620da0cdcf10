"""
Collection and category models, both carrying a cover image reference.
"""
from typing import Optional

from sqlalchemy import Column, String, Text
from sqlmodel import Field

from .base import BaseModel


class Collection(BaseModel, table=True):
    __tablename__ = "Collection"

    name: str = Field(sa_column=Column("name", String(200), nullable=False))
    cover_image: Optional[str] = Field(
        default=None,
        sa_column=Column("coverImage", Text, nullable=True),
    )


class Category(BaseModel, table=True):
    __tablename__ = "Category"

    name: str = Field(sa_column=Column("name", String(200), nullable=False))
    cover_image: Optional[str] = Field(
        default=None,
        sa_column=Column("coverImage", Text, nullable=True),
    )
