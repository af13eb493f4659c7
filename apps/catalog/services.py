"""
Services for Catalog app.

Tags and statuses are reference data: the task lifecycle reads them through
TagCatalog / StatusCatalog and never writes them.
"""
import logging
from typing import Iterable, List, Optional
from uuid import UUID

from apps.core.errors import AuthorizationDenied, Conflict, ValidationFailed
from apps.core.validators import HEX_COLOR_PATTERN, clean_str
from apps.identity.models import Role
from apps.tasks.ports import StatusLookup, StatusRecord, TagLookup, TagRecord
from .models import Status, Tag, TagType

logger = logging.getLogger(__name__)


def _tag_record(tag: Tag) -> TagRecord:
    return TagRecord(id=tag.id, label=tag.label, color=tag.color, type=tag.type)


def _status_record(status: Status) -> StatusRecord:
    return StatusRecord(id=status.id, name=status.name, color=status.color)


class TagCatalog(TagLookup):
    def get(self, tag_id: UUID) -> Optional[TagRecord]:
        tag = Tag.objects.filter(id=tag_id).first()
        return _tag_record(tag) if tag else None

    def find_by_labels(self, labels: Iterable[str]) -> List[TagRecord]:
        return [_tag_record(tag) for tag in Tag.objects.filter(label__in=list(labels))]


class StatusCatalog(StatusLookup):
    def get(self, status_id: UUID) -> Optional[StatusRecord]:
        status = Status.objects.filter(id=status_id).first()
        return _status_record(status) if status else None

    def get_by_name(self, name: str) -> Optional[StatusRecord]:
        status = Status.objects.filter(name=name).first()
        return _status_record(status) if status else None


def create_tag(label, type, color=None) -> TagRecord:
    """Create a tag; label is unique per type, case-insensitively."""
    label = clean_str(label)
    type = clean_str(type)
    missing = [name for name, value in (('label', label), ('type', type)) if not value]
    if missing:
        raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")
    if type not in TagType.values:
        raise ValidationFailed("Invalid type specified")

    color = clean_str(color)
    if not color or not HEX_COLOR_PATTERN.match(color):
        color = '#000000'

    if Tag.objects.filter(label__iexact=label, type=type).exists():
        logger.error(f"CONFLICT: Tag {label} ({type}) already exists")
        raise Conflict("Tag already exists")

    tag = Tag.objects.create(label=label, type=type, color=color)
    logger.info(f"Tag {tag.label} ({tag.type}) created")
    return _tag_record(tag)


def create_status(name, color, actor_role: Optional[str] = None) -> StatusRecord:
    """Create a status. When an actor role is given it must be admin."""
    name = clean_str(name)
    color = clean_str(color)
    if not name or not color:
        raise ValidationFailed("All fields are required")
    if actor_role is not None and actor_role != Role.ADMIN:
        logger.error(f"UNAUTHORIZED: {actor_role} may not create status {name}")
        raise AuthorizationDenied("Unauthorized to create status", code="UNAUTHORIZED", status_code=401)
    if not HEX_COLOR_PATTERN.match(color):
        raise ValidationFailed(f"{color} is not a valid hex color")

    if Status.objects.filter(name=name).exists():
        logger.error(f"CONFLICT: Status {name} already exists")
        raise Conflict("Status already exists")

    status = Status.objects.create(name=name, color=color)
    logger.info(f"Status {status.name} created")
    return _status_record(status)


def list_tags(type=None) -> List[TagRecord]:
    queryset = Tag.objects.all()
    type = clean_str(type)
    if type:
        queryset = queryset.filter(type=type)
    return [_tag_record(tag) for tag in queryset]


def list_statuses() -> List[StatusRecord]:
    return [_status_record(status) for status in Status.objects.all()]
