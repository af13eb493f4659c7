"""Login: credential verification, status gating and session issuance."""
import logging
from dataclasses import dataclass

from django.contrib.auth.hashers import check_password
from django.db import DatabaseError
from django.db.models import F
from django.utils import timezone

from apps.core.errors import AuthorizationDenied, InternalError, NotFound, ValidationFailed
from apps.core.validators import clean_str, normalize_email
from .dtos import SessionDTO
from .jwt_auth import create_session_token, session_ttl_seconds
from .models import Account, Credential, CredentialStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    session: SessionDTO


class AuthenticationService:
    @staticmethod
    def login(email, password) -> LoginResult:
        """
        Verify credentials and issue a session token.

        A correct password on a credential that is not active still fails
        with INACTIVE. Failed password checks bump login_attempts; the
        counter is informational and never locks the account.
        """
        email = normalize_email(email)
        password = clean_str(password)
        if not email or not password:
            logger.warning("Login failed - missing credentials")
            raise ValidationFailed("Email and password are required", code="NO_CREDENTIALS")

        logger.info(f"User login attempt for {email}")

        try:
            account = Account.objects.filter(email=email).first()
            if account is None:
                logger.error(f"NOT_FOUND: User not found for {email}")
                raise NotFound("User not found")

            credential = Credential.objects.filter(account_id=account.id).first()
            if credential is None or not check_password(password, credential.password_hash):
                if credential is not None:
                    Credential.objects.filter(id=credential.id).update(login_attempts=F('login_attempts') + 1)
                logger.error(f"INVALID_CREDENTIALS: Incorrect email or password for {email}")
                raise ValidationFailed("Incorrect email or password", code="INVALID_CREDENTIALS")

            if credential.status != CredentialStatus.ACTIVE:
                logger.info(f"INACTIVE: User {account.id} is not active ({credential.status})")
                raise AuthorizationDenied("User is not active", code="INACTIVE")

            credential.last_login = timezone.now()
            credential.login_attempts = 0
            credential.save(update_fields=['last_login', 'login_attempts', 'updated_at'])
        except DatabaseError:
            logger.exception(f"Login error for {email}")
            raise InternalError("Login failed. Please try again.", code="SERVER_ERROR")

        logger.info(f"Login successful for account {account.id}")

        return LoginResult(
            token=create_session_token(account.id, account.role),
            session=SessionDTO(
                id=account.id,
                role=account.role,
                name=account.name,
                email=account.email,
                admin=account.created_by_id,
                session_expires_in=session_ttl_seconds(),
            ),
        )
