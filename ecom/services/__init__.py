"""
Services layer for the e-commerce auth backend.

Business logic shared by the HTTP API and the admin scripts.
"""

from .notification_service import NotificationService
from .user_auth_service import UserAuthService, AuthResult, AuthStatus

__all__ = [
    # Services
    "UserAuthService",
    "NotificationService",
    # Data classes
    "AuthResult",
    "AuthStatus",
]
