"""
Lookups the task lifecycle needs from other apps.

The identity app implements AccountLookup and the catalog app implements
TagLookup / StatusLookup; TaskLifecycle only ever sees these interfaces.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional
from uuid import UUID


@dataclass(frozen=True)
class AccountRecord:
    id: UUID
    name: str
    email: str
    role: str
    is_active: bool


@dataclass(frozen=True)
class TagRecord:
    id: UUID
    label: str
    color: str
    type: str


@dataclass(frozen=True)
class StatusRecord:
    id: UUID
    name: str
    color: str


class AccountLookup(ABC):
    @abstractmethod
    def get(self, account_id: UUID) -> Optional[AccountRecord]:
        pass


class TagLookup(ABC):
    @abstractmethod
    def get(self, tag_id: UUID) -> Optional[TagRecord]:
        pass

    @abstractmethod
    def find_by_labels(self, labels: Iterable[str]) -> List[TagRecord]:
        """Every tag whose label is in `labels` (any type)."""
        pass


class StatusLookup(ABC):
    @abstractmethod
    def get(self, status_id: UUID) -> Optional[StatusRecord]:
        pass

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[StatusRecord]:
        pass
