"""
Chat domain models.

Dependency chain (no cascading deletes):
    Notification -> Message
    Reaction     -> Message
    Message      -> ChatRoom, User
    Membership   -> ChatRoom, User
"""
from typing import Optional

from sqlalchemy import Column, ForeignKey, String, Text
from sqlmodel import Field, Index

from .base import BaseModel


class ChatRoom(BaseModel, table=True):
    __tablename__ = "ChatRoom"

    name: Optional[str] = Field(default=None, sa_column=Column("name", String(200), nullable=True))
    type: str = Field(default="direct", sa_column=Column("type", String(20), nullable=False))


class Membership(BaseModel, table=True):
    __tablename__ = "Membership"

    room_id: str = Field(
        sa_column=Column("roomId", String(36), ForeignKey("ChatRoom.id"), nullable=False)
    )
    user_id: str = Field(
        sa_column=Column("userId", String(36), ForeignKey("User.id"), nullable=False)
    )
    role: str = Field(default="MEMBER", sa_column=Column("role", String(20), nullable=False))

    __table_args__ = (
        Index("idx_membership_room_user", "roomId", "userId"),
    )


class Message(BaseModel, table=True):
    """
    Chat message; may carry an attachment reference.
    """
    __tablename__ = "Message"

    content: Optional[str] = Field(default=None, sa_column=Column("content", Text, nullable=True))
    room_id: str = Field(
        sa_column=Column("roomId", String(36), ForeignKey("ChatRoom.id"), nullable=False)
    )
    user_id: str = Field(
        sa_column=Column("userId", String(36), ForeignKey("User.id"), nullable=False)
    )
    attachment_url: Optional[str] = Field(
        default=None,
        sa_column=Column("attachmentUrl", Text, nullable=True),
    )
    attachment_type: Optional[str] = Field(
        default=None,
        sa_column=Column("attachmentType", String(100), nullable=True),
    )
    attachment_name: Optional[str] = Field(
        default=None,
        sa_column=Column("attachmentName", String(512), nullable=True),
    )

    __table_args__ = (
        Index("idx_message_room_created", "roomId", "createdAt"),
    )


class Reaction(BaseModel, table=True):
    __tablename__ = "Reaction"

    emoji: str = Field(sa_column=Column("emoji", String(32), nullable=False))
    message_id: str = Field(
        sa_column=Column("messageId", String(36), ForeignKey("Message.id"), nullable=False)
    )
    user_id: str = Field(
        sa_column=Column("userId", String(36), ForeignKey("User.id"), nullable=False)
    )


class Notification(BaseModel, table=True):
    __tablename__ = "Notification"

    content: str = Field(sa_column=Column("content", Text, nullable=False))
    user_id: str = Field(
        sa_column=Column("userId", String(36), ForeignKey("User.id"), nullable=False)
    )
    message_id: Optional[str] = Field(
        default=None,
        sa_column=Column("messageId", String(36), ForeignKey("Message.id"), nullable=True),
    )
    is_read: bool = Field(default=False, sa_column_kwargs={"name": "isRead"})
