"""
Asset model.
"""
from typing import List, Optional

from sqlalchemy import Column, String, Text
from sqlmodel import Field, Index

from .base import BaseModel, StringArrayType


class Asset(BaseModel, table=True):
    """
    Primary media asset.

    Holds three independent reference fields: the main file path, the
    thumbnail path and the video scrub preview frames.
    """
    __tablename__ = "Asset"

    filename: str = Field(sa_column=Column("filename", String(512), nullable=False))
    original_name: str = Field(sa_column=Column("originalName", String(512), nullable=False))
    mime_type: str = Field(sa_column=Column("mimeType", String(255), nullable=False))
    path: Optional[str] = Field(default=None, sa_column=Column("path", Text, nullable=True))
    thumbnail_path: Optional[str] = Field(
        default=None,
        sa_column=Column("thumbnailPath", Text, nullable=True),
    )
    preview_frames: Optional[List[str]] = Field(
        default=None,
        sa_column=Column("previewFrames", StringArrayType(), nullable=True),
        description="Ordered scrub frame URLs; the first frame represents the sequence",
    )
    ai_data: Optional[str] = Field(
        default=None,
        sa_column=Column("aiData", Text, nullable=True),
        description="JSON text with optional caption/summary/description keys",
    )

    __table_args__ = (
        Index("idx_asset_mime_type", "mimeType"),
        Index("idx_asset_filename", "filename"),
    )
