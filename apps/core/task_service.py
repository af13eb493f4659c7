"""
TaskService - Abstraction layer for background task execution.

This module provides a platform-agnostic interface for executing background tasks.
The actual backend is determined by the TASK_BACKEND setting.

Usage:
    from apps.core.task_service import TaskService

    # Push an event to an account's live connection
    TaskService.push_notification(account_id=uuid, event="task_assigned", payload={...})

    # Sweep expired reset/activation tokens
    TaskService.clear_expired_tokens()

Environment Configuration:
    TASK_BACKEND=local   # Sync execution (development, tests)
    TASK_BACKEND=celery  # Celery + Redis (production)
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict
from uuid import UUID

from django.conf import settings

logger = logging.getLogger(__name__)


class TaskServiceInterface(ABC):
    """
    Abstract interface for background task execution.

    Implementations:
    - LocalTaskService: Sync execution for development/testing
    - CeleryTaskService: Celery + Redis for production
    """

    @abstractmethod
    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """
        Queue a task for background execution.

        Args:
            task_name: Identifier for the task handler
            payload: Data to pass to the task
            delay_seconds: Delay before execution (0 = immediate)

        Returns:
            Task ID for tracking
        """
        pass


def _get_backend() -> TaskServiceInterface:
    """Get the configured task backend based on the TASK_BACKEND setting."""
    backend = getattr(settings, 'TASK_BACKEND', 'local')

    if backend == 'local':
        from apps.core.backends.local_backend import LocalTaskService
        return LocalTaskService()
    elif backend == 'celery':
        from apps.core.backends.celery_backend import CeleryTaskService
        return CeleryTaskService()
    else:
        raise ValueError(f"Unknown TASK_BACKEND: {backend}")


class TaskService:
    """
    Facade for sending background tasks.

    This class provides static methods for each task type,
    delegating to the configured backend.
    """

    @staticmethod
    def push_notification(account_id: UUID, event: str, payload: Dict[str, Any]) -> str:
        """
        Queue a push event for an account's live connection.

        Used by: Notifications app after task assignment and status changes.
        """
        logger.info(f"Queueing push_notification '{event}' for account {account_id}")
        return _get_backend().send_task(
            task_name="push_notification",
            payload={"account_id": str(account_id), "event": event, "payload": payload},
        )

    @staticmethod
    def clear_expired_tokens() -> str:
        """
        Queue the sweep of expired reset/activation tokens.

        Used by: the clear_expired_tokens management command.
        """
        logger.info("Queueing clear_expired_tokens task")
        return _get_backend().send_task(
            task_name="clear_expired_tokens",
            payload={},
        )
