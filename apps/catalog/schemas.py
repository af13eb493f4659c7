"""API Schemas for Catalog app."""
from typing import Optional

from ninja import Schema


class TagCreate(Schema):
    label: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None


class StatusCreate(Schema):
    name: Optional[str] = None
    color: Optional[str] = None
