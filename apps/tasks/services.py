"""Services for Tasks app - wires TaskLifecycle to the apps that own its lookups."""
from apps.catalog.services import StatusCatalog, TagCatalog
from apps.identity.services import AccountDirectory
from apps.notifications.services import notify
from .lifecycle import TaskLifecycle


def get_task_lifecycle() -> TaskLifecycle:
    return TaskLifecycle(
        accounts=AccountDirectory(),
        tags=TagCatalog(),
        statuses=StatusCatalog(),
        notifier=notify,
    )
