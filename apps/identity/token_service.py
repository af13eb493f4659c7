"""
Single-use activation and password-reset tokens.

Only the SHA-256 digest of a token is stored, together with its expiry.
An account holds at most one unexpired token at a time: issuing while one
is outstanding is refused with RateLimited instead of replacing it.
"""
import hashlib
import logging
import math
import secrets
from datetime import datetime, timedelta
from typing import Tuple
from uuid import UUID

from django.conf import settings
from django.contrib.auth.hashers import make_password
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.errors import NotFound, RateLimited, StateInvalid, ValidationFailed
from apps.core.mail import deliver
from apps.core.validators import clean_str, is_strong_password, normalize_email
from .dtos import IssuedToken
from .models import Account, Credential, CredentialStatus

logger = logging.getLogger(__name__)

PASSWORD_RULE_MESSAGE = (
    "Password must be at least 8 characters and include at least 1 uppercase letter, "
    "1 lowercase letter, 1 number, and 1 special character"
)


class TokenPurpose:
    RESET = "reset"
    ACTIVATION = "activation"


def token_ttl(purpose: str) -> timedelta:
    if purpose == TokenPurpose.ACTIVATION:
        return timedelta(minutes=settings.ACTIVATION_TOKEN_TTL_MINUTES)
    return timedelta(minutes=settings.RESET_TOKEN_TTL_MINUTES)


def digest_token(plain_token: str) -> str:
    return hashlib.sha256(plain_token.encode()).hexdigest()


def generate_token() -> Tuple[str, str]:
    """Return (plain token for delivery, digest for storage)."""
    plain_token = secrets.token_hex(64)
    return plain_token, digest_token(plain_token)


def minutes_until(expiry: datetime, now: datetime) -> int:
    return max(math.ceil((expiry - now).total_seconds() / 60), 0)


def reset_link(plain_token: str) -> str:
    return f"{settings.FRONTEND_URL}/resetPassword/{plain_token}"


def activation_link(plain_token: str) -> str:
    return f"{settings.FRONTEND_URL}/set-password?token={plain_token}"


class TokenService:
    @staticmethod
    def issue_token(account_id: UUID, purpose: str = TokenPurpose.RESET) -> IssuedToken:
        """
        Store a fresh token digest for the account and return the plain token once.

        The write is a single conditional UPDATE that only matches when no
        unexpired token exists, so two concurrent calls cannot both succeed.
        """
        for _ in range(2):
            plain_token, digest = generate_token()
            now = timezone.now()
            expiry = now + token_ttl(purpose)

            updated = Credential.objects.filter(account_id=account_id).filter(
                Q(reset_token_expiration__isnull=True) | Q(reset_token_expiration__lte=now)
            ).update(
                reset_token_hash=digest,
                reset_token_expiration=expiry,
                updated_at=now,
            )
            if updated:
                logger.info(f"Issued {purpose} token for account {account_id} (expires {expiry.isoformat()})")
                return IssuedToken(plain_token=plain_token, expiry=expiry)

            row = Credential.objects.filter(account_id=account_id).values('reset_token_expiration').first()
            if row is None:
                raise NotFound("Invalid user")

            current_expiry = row['reset_token_expiration']
            if current_expiry is not None and current_expiry > now:
                wait = minutes_until(current_expiry, now)
                logger.warning(f"TOO_MANY_REQUESTS: Active token available for account {account_id}, wait {wait} min")
                raise RateLimited(
                    f"You already have an active link. Try after {wait} minutes",
                    wait_minutes=wait,
                    data={"wait_minutes": wait},
                )
            # The outstanding token expired between the update and the read; retry once

        raise RateLimited("You already have an active link. Try again shortly", wait_minutes=1)

    @staticmethod
    def redeem_token(plain_token: str, password: str) -> UUID:
        """
        Consume a token and set the account password in the same write.

        Wrong and expired tokens fail identically. A pending credential
        becomes active and its account is flagged active.
        """
        digest = digest_token(plain_token)
        now = timezone.now()

        with transaction.atomic():
            credential = Credential.objects.select_for_update().filter(
                reset_token_hash=digest,
                reset_token_expiration__gt=now,
            ).first()

            if credential is None:
                logger.error("NOT_FOUND: No valid token found")
                raise NotFound("Invalid or expired page")

            credential.password_hash = make_password(password)
            credential.reset_token_hash = None
            credential.reset_token_expiration = None
            if credential.status == CredentialStatus.PENDING:
                credential.status = CredentialStatus.ACTIVE
            credential.save(update_fields=[
                'password_hash', 'reset_token_hash', 'reset_token_expiration', 'status', 'updated_at',
            ])

            Account.objects.filter(id=credential.account_id).update(is_active=True, updated_at=now)

        logger.info(f"Password set for account {credential.account_id}")
        return credential.account_id

    @staticmethod
    def clear_expired_tokens() -> int:
        """Null out token fields whose expiry has passed. Returns rows cleared."""
        return Credential.objects.filter(
            reset_token_expiration__lte=timezone.now(),
        ).update(reset_token_hash=None, reset_token_expiration=None)

    @staticmethod
    def request_password_reset(email) -> IssuedToken:
        """
        Issue a reset token and mail the link.

        Delivery is best-effort: once the token is stored, a mail failure is
        logged and the request still succeeds.
        """
        if not clean_str(email):
            raise ValidationFailed("Email is required.")

        email = normalize_email(email)
        logger.info(f"Forgot password attempt for {email}")

        account = Account.objects.filter(email=email).only('id', 'is_active').first()
        if account is None:
            logger.error(f"NOT_FOUND: User not found for {email}")
            raise NotFound("User not found")

        if not account.is_active:
            logger.error(f"UNAUTHORIZED: User not active for {email}")
            raise ValidationFailed("User not active", code="UNAUTHORIZED", status_code=401)

        if not Credential.objects.filter(account_id=account.id).exists():
            logger.error(f"UNPROCESSABLE_ENTITY: No credential for account {account.id}")
            raise StateInvalid("Invalid user")

        issued = TokenService.issue_token(account.id, TokenPurpose.RESET)

        result = deliver(
            email,
            "Password Reset",
            f"Please click the link to reset your password: {reset_link(issued.plain_token)}",
        )
        if result.ok:
            logger.info(f"Password reset email sent to account {account.id}")
        else:
            logger.error(f"Error sending password reset email to account {account.id}: {result.error}")

        return issued

    @staticmethod
    def reset_password(reset_token, password) -> UUID:
        reset_token = clean_str(reset_token)
        password = clean_str(password)
        if not reset_token or not password:
            raise ValidationFailed("All inputs are required")
        if not is_strong_password(password):
            raise ValidationFailed(PASSWORD_RULE_MESSAGE)
        return TokenService.redeem_token(reset_token, password)
