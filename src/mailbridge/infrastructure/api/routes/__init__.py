"""API Routes for MailBridge."""

from mailbridge.infrastructure.api.routes.auth_router import router as auth_router
from mailbridge.infrastructure.api.routes.email_router import router as email_router
from mailbridge.infrastructure.api.routes.messages_router import router as messages_router

__all__ = [
    "auth_router",
    "email_router",
    "messages_router",
]
