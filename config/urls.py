"""
URL configuration for the Tako task tracker.
"""
from django.contrib import admin
from django.urls import path
from ninja import NinjaAPI

from apps.core.responses import register_exception_handlers

api = NinjaAPI(
    title="Tako API",
    version="1.0.0",
    description="Task tracking with role-scoped access",
    docs_url="/docs",
)
register_exception_handlers(api)

from apps.catalog.api import status_router, tag_router
from apps.identity.api import router as auth_router, user_router
from apps.tasks.api import router as tasks_router

api.add_router("/auth/v1/", auth_router)
api.add_router("/user/v1/", user_router)
api.add_router("/tasks/v1/", tasks_router)
api.add_router("/tags/v1/", tag_router)
api.add_router("/status/v1/", status_router)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', api.urls),
]
