"""
Pytest fixtures shared across the unit and CLI suites.

Every test gets its own in-memory SQLite database with foreign keys
enforced, so delete ordering is checked the same way PostgreSQL checks it.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest
from sqlmodel import Session, SQLModel

from reconcile.core.database import build_engine
from reconcile.models import Asset, ChatRoom, Membership, Message, Notification, Reaction, User

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def test_engine():
    """Create an in-memory SQLite engine with all tables."""
    engine = build_engine("sqlite:///:memory:", "sqlite")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def test_db(test_engine):
    """Session bound to the in-memory database."""
    session = Session(test_engine)
    yield session
    session.close()


@pytest.fixture
def asset_factory(test_db: Session) -> Callable[..., Asset]:
    """
    Factory that inserts assets with strictly increasing creation times.
    """
    created = []

    def _create(**overrides) -> Asset:
        position = len(created)
        name = overrides.pop("filename", f"asset_{position:03d}.jpg")
        asset = Asset(
            filename=name,
            original_name=overrides.pop("original_name", name),
            mime_type=overrides.pop("mime_type", "image/jpeg"),
            created_at=overrides.pop("created_at", BASE_TIME + timedelta(minutes=position)),
            **overrides,
        )
        test_db.add(asset)
        test_db.commit()
        test_db.refresh(asset)
        created.append(asset)
        return asset

    return _create


@pytest.fixture
def test_user(test_db: Session) -> User:
    user = User(email=f"test_{uuid.uuid4().hex[:8]}@example.com", name="Test User")
    test_db.add(user)
    test_db.commit()
    test_db.refresh(user)
    return user


@pytest.fixture
def chat_graph(test_db: Session, test_user: User):
    """
    Populate a small chat subgraph: one room with a member, two messages,
    a reaction and a notification pointing at the first message.
    """
    room = ChatRoom(name="General", type="group")
    test_db.add(room)
    test_db.commit()

    test_db.add(Membership(room_id=room.id, user_id=test_user.id, role="ADMIN"))
    first = Message(
        content="Hello",
        room_id=room.id,
        user_id=test_user.id,
        created_at=BASE_TIME,
    )
    second = Message(
        content="See attached",
        room_id=room.id,
        user_id=test_user.id,
        attachment_url="https://abc.supabase.co/storage/v1/chat/report.pdf",
        attachment_type="application/pdf",
        attachment_name="report.pdf",
        created_at=BASE_TIME + timedelta(minutes=5),
    )
    test_db.add(first)
    test_db.add(second)
    test_db.commit()

    test_db.add(Reaction(emoji="👍", message_id=first.id, user_id=test_user.id))
    test_db.add(Notification(content="New message", user_id=test_user.id, message_id=first.id))
    test_db.commit()
    return room
