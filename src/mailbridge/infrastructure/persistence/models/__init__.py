"""SQLAlchemy models for MailBridge tables.

All models inherit from the Base class defined in database.py and are
created on application startup.
"""

from mailbridge.infrastructure.persistence.models.message import MessageModel
from mailbridge.infrastructure.persistence.models.user import UserModel

__all__ = [
    "MessageModel",
    "UserModel",
]
