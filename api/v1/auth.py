"""
Authentication endpoints.

Handles registration, login and the forgot/reset password flow.
"""

import logging
from typing import Optional, List

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from ecom.auth.users import USER_TYPE_USER, USER_TYPE_ADMIN
from ecom.services import AuthResult, AuthStatus
from ..deps import ServicesDep, CurrentUser
from ..responses import ApiResponse, result_response

logger = logging.getLogger(__name__)

router = APIRouter()


# Request models
#
# Bodies use the camelCase names clients send and reject unknown fields.

class StrictBody(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        coerce_numbers_to_str=True
    )


class ShippingAddress(StrictBody):
    """Saved delivery address."""
    pincode: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    landmark: Optional[str] = None
    city: Optional[str] = None
    is_default: bool = Field(False, alias="isDefault")
    state: Optional[str] = None
    address_type: Optional[str] = Field(None, alias="addressType")
    full_name: Optional[str] = Field(None, alias="fullName")
    mobile: Optional[str] = None
    address_no: Optional[str] = Field(None, alias="addressNo")


class WishlistItem(StrictBody):
    product_id: str = Field(..., alias="productId")


class RegisterRequest(StrictBody):
    """User registration request."""
    username: Optional[str] = Field(None, description="Unique login name")
    password: Optional[str] = Field(None, description="Password")
    email: Optional[str] = Field(None, description="Unique email address")
    name: Optional[str] = Field(None, description="Display name")
    mobile_no: Optional[str] = Field(None, alias="mobileNo", description="Mobile number")
    user_type: int = Field(USER_TYPE_USER, alias="userType", ge=USER_TYPE_USER, le=USER_TYPE_ADMIN)
    shipping_address: List[ShippingAddress] = Field(default_factory=list, alias="shippingAddress")
    wishlist: List[WishlistItem] = Field(default_factory=list)


class LoginRequest(StrictBody):
    """Login request."""
    username: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(StrictBody):
    email: Optional[str] = None


class ValidateOtpRequest(StrictBody):
    otp: Optional[str] = None


class ResetPasswordRequest(StrictBody):
    code: Optional[str] = None
    new_password: Optional[str] = Field(None, alias="newPassword")


# Endpoints

@router.post("/register", response_model=ApiResponse)
async def register(request: RegisterRequest, services: ServicesDep):
    """
    Register a new user.

    Returns the new user's id.
    """
    result = services.user_auth.register(
        username=request.username,
        password=request.password,
        email=request.email,
        name=request.name,
        mobile_no=request.mobile_no,
        user_type=request.user_type,
        shipping_address=[a.model_dump() for a in request.shipping_address],
        wishlist=[w.model_dump() for w in request.wishlist]
    )
    return result_response(result)


@router.post("/login", response_model=ApiResponse)
async def login(request: LoginRequest, services: ServicesDep):
    """
    Login with username and password.

    Returns the user id and a bearer token.
    """
    result = services.user_auth.login(
        username=request.username,
        password=request.password
    )
    return result_response(result)


@router.post("/forgot-password", response_model=ApiResponse)
async def forgot_password(request: ForgotPasswordRequest, services: ServicesDep):
    """
    Send a one-time reset code to the account's email.

    An unknown email still answers 200, with status RECORD_NOT_FOUND.
    """
    result = services.user_auth.forgot_password(request.email)
    return result_response(result)


@router.post("/validate-otp", response_model=ApiResponse)
async def validate_otp(request: ValidateOtpRequest, services: ServicesDep):
    """Check a reset code. The code stays valid for the reset step."""
    result = services.user_auth.validate_otp(request.otp)
    return result_response(result)


@router.put("/reset-password", response_model=ApiResponse)
async def reset_password(request: ResetPasswordRequest, services: ServicesDep):
    """Set a new password using the reset code. The code is consumed."""
    result = services.user_auth.reset_password(
        code=request.code,
        new_password=request.new_password
    )
    return result_response(result)


@router.get("/me", response_model=ApiResponse)
async def get_current_user_info(current_user: CurrentUser):
    """
    Get current authenticated user info.

    Requires valid bearer token.
    """
    data = current_user.to_public_dict()
    data["id"] = current_user.user_id
    return result_response(AuthResult(AuthStatus.SUCCESS, "User found", data))
