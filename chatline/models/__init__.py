"""
models/__init__.py
------------------
Re-export all models so create_tables.py (and Alembic, if added) can import
Base and discover all tables via a single import:

    from chatline.models import Base
"""

from chatline.db.base import Base
from chatline.models.user import User, UserRole
from chatline.models.chat import Chat, ChatParticipant, ChatType
from chatline.models.message import Media, Message, MessageType

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Chat",
    "ChatParticipant",
    "ChatType",
    "Message",
    "MessageType",
    "Media",
]
