# Import all models for easy access
from .asset import Asset
from .base import BaseModel
from .chat import ChatRoom, Membership, Message, Notification, Reaction
from .collection import Category, Collection
from .feedback import Feedback
from .user import User

__all__ = [
    "BaseModel",
    "Asset",
    "User",
    "Collection",
    "Category",
    "Feedback",
    "ChatRoom",
    "Membership",
    "Message",
    "Reaction",
    "Notification",
]
