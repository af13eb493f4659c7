"""Services for Identity app."""
import logging
from typing import Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.errors import AuthorizationDenied, InternalError, NotFound, ValidationFailed
from apps.core.mail import deliver
from apps.core.validators import clean_str, missing_fields, normalize_email, parse_id
from apps.tasks.ports import AccountLookup, AccountRecord
from .dtos import AccountDTO
from .models import Account, Credential, CredentialStatus, Role
from .permissions import can_manage_account, check_account_creation, requires_creator
from .token_service import TokenPurpose, TokenService, activation_link

logger = logging.getLogger(__name__)

REQUIRED_ACCOUNT_FIELDS = ['name', 'email', 'mobile', 'role']


def _to_dto(account: Account) -> AccountDTO:
    return AccountDTO(
        id=account.id,
        name=account.name,
        email=account.email,
        mobile=account.mobile,
        role=account.role,
        is_active=account.is_active,
        created_by=account.created_by_id,
    )


def get_account_dto(account_id) -> AccountDTO | None:
    try:
        return _to_dto(Account.objects.get(id=account_id))
    except Account.DoesNotExist:
        return None


class AccountDirectory(AccountLookup):
    """AccountLookup backed by the identity tables."""

    def get(self, account_id: UUID) -> Optional[AccountRecord]:
        account = Account.objects.filter(id=account_id).only(
            'id', 'name', 'email', 'role', 'is_active'
        ).first()
        if account is None:
            return None
        return AccountRecord(
            id=account.id,
            name=account.name,
            email=account.email,
            role=account.role,
            is_active=account.is_active,
        )


def _resolve_creator(role: str, created_by) -> Optional[Account]:
    if not requires_creator(role):
        return None

    try:
        creator_id = parse_id(created_by, "created_by")
    except ValidationFailed:
        raise ValidationFailed("Valid manager/admin is required for this role")

    creator = Account.objects.filter(id=creator_id).only('id', 'role', 'is_active').first()
    if creator is None or not creator.is_active:
        logger.error(f"BAD_REQUEST: Creator {creator_id} is not active")
        raise ValidationFailed("Creator is not active")

    check_account_creation(role, creator.role).raise_if_denied()
    return creator


def create_account(fields: dict, creator_id=None) -> AccountDTO:
    """
    Create an Account with its pending Credential and send the activation link.

    Both rows and the activation token are written in one transaction; if
    the activation mail cannot be delivered the transaction is rolled back
    and no account remains.
    """
    data = dict(fields)
    if creator_id is not None:
        data['created_by'] = creator_id

    role = (clean_str(data.get('role')) or '').lower()

    required = list(REQUIRED_ACCOUNT_FIELDS)
    if role != Role.ADMIN and not data.get('created_by'):
        required.append('created_by')
    missing = missing_fields(data, required)
    if missing:
        logger.error(f"BAD_REQUEST: Missing required fields: {', '.join(missing)}")
        raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")

    if role not in Role.values:
        raise ValidationFailed("Invalid role specified")

    name = clean_str(data.get('name'))
    email = normalize_email(data.get('email'))
    mobile = clean_str(data.get('mobile'))
    if not name or not email or not mobile:
        raise ValidationFailed("Missing required fields: name, email, mobile")

    creator = _resolve_creator(role, data.get('created_by'))

    if Account.objects.filter(email=email).exists():
        logger.error(f"BAD_REQUEST: email already exists: {email}")
        raise ValidationFailed("Email already exists")
    if Account.objects.filter(mobile=mobile).exists():
        logger.error(f"BAD_REQUEST: mobile already exists: {mobile}")
        raise ValidationFailed("Mobile number already exists")

    try:
        with transaction.atomic():
            account = Account.objects.create(
                name=name,
                email=email,
                mobile=mobile,
                role=role,
                created_by=creator,
            )
            Credential.objects.create(
                account=account,
                password_hash='',
                status=CredentialStatus.PENDING,
            )
            issued = TokenService.issue_token(account.id, TokenPurpose.ACTIVATION)

            result = deliver(
                email,
                "Set your password",
                f"Please click the link to set your password: {activation_link(issued.plain_token)}",
            )
            if not result.ok:
                logger.error(f"Error sending activation email to account {account.id}: {result.error}")
                raise InternalError("Failed to send email notification")
    except IntegrityError:
        logger.error(f"BAD_REQUEST: duplicate email or mobile for {email}")
        raise ValidationFailed("Email or mobile already exists")

    logger.info(f"CREATED: Account {account.id} created with role {role}")
    return _to_dto(account)


def set_account_active(account_id, is_active, actor: Optional[Account] = None) -> AccountDTO:
    """
    Activate or deactivate an account. Deactivation never deletes.

    With an actor, only admins and the manager who created the account may
    change it.
    """
    if account_id is None or not isinstance(is_active, bool):
        raise ValidationFailed("User ID and status are required")
    account_id = parse_id(account_id, "account_id")

    target = Account.objects.filter(id=account_id).only('id', 'created_by').first()
    if target is None:
        logger.error(f"NOT_FOUND: User {account_id} not found")
        raise NotFound("User not found")

    if actor is not None and not can_manage_account(actor.role, actor.id, target.created_by_id):
        logger.error(f"FORBIDDEN: {actor.id} cannot change status of {account_id}")
        raise AuthorizationDenied("You are not authorized to update this user")

    Account.objects.filter(id=account_id).update(is_active=is_active, updated_at=timezone.now())

    logger.info(f"Account {account_id} {'activated' if is_active else 'deactivated'}")
    return get_account_dto(account_id)
