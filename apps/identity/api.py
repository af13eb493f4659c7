"""
Identity API endpoints with JWT session authentication.

Provides login, logout, the password reset flow and account management.
The session token travels in the httpOnly `token` cookie.
"""
import logging
from typing import Optional

from django.conf import settings
from django.http import HttpRequest
from ninja import Router
from ninja.errors import AuthenticationError

from apps.core.log_meta import build_log_meta
from apps.core.responses import respond
from .auth_service import AuthenticationService
from .dtos import (
    AccountCreate,
    AccountStatusUpdate,
    ForgotPasswordSchema,
    LoginSchema,
    ResetPasswordSchema,
)
from .jwt_auth import SESSION_COOKIE_NAME, get_account_id_from_token, get_session_cookie_settings
from .models import Account
from .services import create_account, set_account_active
from .token_service import TokenService

logger = logging.getLogger(__name__)

router = Router(tags=["Auth"])
user_router = Router(tags=["Users"])


# =============================================================================
# Helper Functions
# =============================================================================

def get_current_account(request: HttpRequest) -> Optional[Account]:
    """
    Extract and validate the account from the session cookie.

    Returns the Account if the token is valid and the account active, None otherwise.
    """
    token = request.COOKIES.get(SESSION_COOKIE_NAME)
    if not token:
        return None

    account_id = get_account_id_from_token(token)
    if not account_id:
        return None

    return Account.objects.filter(id=account_id, is_active=True).first()


def require_account(request: HttpRequest) -> Account:
    """
    Require authentication. Raises 401 if not authenticated.
    """
    account = get_current_account(request)
    if not account:
        logger.warning("UNAUTHORIZED: missing or invalid session", extra=build_log_meta(request))
        raise AuthenticationError()
    return account


def is_production() -> bool:
    return not settings.DEBUG


# =============================================================================
# Auth Endpoints
# =============================================================================

@router.post("/login", auth=None)
def login(request: HttpRequest, payload: LoginSchema):
    """
    Authenticate and set the session cookie.

    Returns the session summary; the token itself is only in the cookie.
    """
    logger.info("User login attempt", extra=build_log_meta(request, email=payload.email))
    result = AuthenticationService.login(payload.email, payload.password)

    response = respond(200, "LOGIN_SUCCESS", "Login successful", result.session)
    response.set_cookie(SESSION_COOKIE_NAME, result.token, **get_session_cookie_settings(is_production()))
    return response


@router.post("/logout", auth=None)
def logout(request: HttpRequest):
    response = respond(200, "SUCCESS", "Logged out successfully")
    response.delete_cookie(SESSION_COOKIE_NAME, path='/', samesite='Strict')
    return response


@router.post("/forgotPassword", auth=None)
def forgot_password(request: HttpRequest, payload: ForgotPasswordSchema):
    """
    Issue a password reset link.

    A failed mail delivery is logged but still answers SUCCESS once the
    token is stored.
    """
    logger.info("Password reset requested", extra=build_log_meta(request, email=payload.email))
    TokenService.request_password_reset(payload.email)
    return respond(200, "SUCCESS", "Password reset link sent to your email")


@router.post("/resetPassword", auth=None)
def reset_password(request: HttpRequest, payload: ResetPasswordSchema):
    TokenService.reset_password(payload.reset_token, payload.password)
    return respond(200, "SUCCESS", "Password has been reset successfully")


# =============================================================================
# User Endpoints
# =============================================================================

@user_router.post("/create", auth=None)
def create_user(request: HttpRequest, payload: AccountCreate):
    """
    Create an account and email its activation link.

    A signed-in caller is the creator; otherwise `created_by` from the body
    is used (admins need no creator).
    """
    creator = get_current_account(request)
    logger.info(
        "Attempt to create a new user",
        extra=build_log_meta(request, role=payload.role, creator=str(creator.id) if creator else None),
    )
    account = create_account(payload.model_dump(), creator_id=creator.id if creator else None)
    return respond(201, "CREATED", "User created successfully", account)


@user_router.post("/updateUserStatus", auth=None)
def update_user_status(request: HttpRequest, payload: AccountStatusUpdate):
    actor = require_account(request)
    account = set_account_active(payload.account_id, payload.is_active, actor=actor)
    return respond(
        200,
        "SUCCESS",
        f"User {'activated' if account.is_active else 'deactivated'} successfully",
        account,
    )
