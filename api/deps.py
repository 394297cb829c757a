"""
API dependencies.

Provides dependency injection for services and bearer authentication.
"""

import logging
from typing import Optional, Annotated
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ecom.config import load_config, Config
from ecom.services import UserAuthService, NotificationService
from ecom.auth import JWTHandler, OTPGenerator, UserStore, User

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


@dataclass
class Services:
    """Container for all services."""
    config: Config
    user_auth: UserAuthService


def build_services(config: Optional[Config] = None) -> Services:
    """Wire every service from a config (loads from env if not provided)."""
    config = config or load_config()

    jwt = JWTHandler(
        secret_key=config.token.secret_key or None,
        expires_in=config.token.access_token_expire_seconds
    )
    users = UserStore(config.users_file)
    otp = OTPGenerator(
        length=config.password_reset.otp_length,
        expire_minutes=config.password_reset.otp_expire_minutes
    )
    notifications = NotificationService(config.notifications)
    user_auth = UserAuthService(
        jwt_handler=jwt,
        user_store=users,
        otp_generator=otp,
        notifications=notifications,
        config=config
    )

    return Services(config=config, user_auth=user_auth)


# Global services instance (singleton)
_services: Optional[Services] = None


def get_services() -> Services:
    """
    Get or create the services singleton.

    This initializes all services on first call.
    """
    global _services

    if _services is None:
        logger.info("Initializing services...")
        _services = build_services()
        logger.info("Services initialized successfully")

    return _services


def close_services():
    """Drop the services singleton."""
    global _services
    if _services:
        _services = None
        logger.info("Services closed")


# Dependency for getting services
def services_dep() -> Services:
    """FastAPI dependency for services."""
    return get_services()


ServicesDep = Annotated[Services, Depends(services_dep)]


# Authentication dependencies

async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    services: ServicesDep
) -> User:
    """
    Get current user from the bearer token (required).

    Raises 401 if no valid token is provided.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"}
        )

    user = services.user_auth.get_current_user(credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return user


# Type aliases for dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
