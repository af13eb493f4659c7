"""DTOs for Identity app."""
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID
from typing import Any, Optional

from ninja import Schema


@dataclass(frozen=True)
class AccountDTO:
    id: UUID
    name: str
    email: str
    mobile: str
    role: str
    is_active: bool
    created_by: Optional[UUID]


@dataclass(frozen=True)
class IssuedToken:
    plain_token: str
    expiry: datetime


@dataclass(frozen=True)
class SessionDTO:
    id: UUID
    role: str
    name: str
    email: str
    admin: Optional[UUID]
    session_expires_in: int


class AccountCreate(Schema):
    name: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    role: Optional[str] = None
    created_by: Optional[str] = None


class AccountStatusUpdate(Schema):
    account_id: Optional[str] = None
    is_active: Any = None


class LoginSchema(Schema):
    email: Any = None
    password: Any = None


class ForgotPasswordSchema(Schema):
    email: Any = None


class ResetPasswordSchema(Schema):
    reset_token: Any = None
    password: Any = None
