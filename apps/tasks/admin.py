from django.contrib import admin
from .models import SelfTaskMarker, Task, TaskComment


class TaskCommentInline(admin.TabularInline):
    model = TaskComment
    extra = 0
    readonly_fields = ['author', 'comment', 'created_at']


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'priority', 'status', 'assigned_to', 'created_by', 'due_date', 'is_self', 'is_deleted']
    list_filter = ['priority', 'status', 'is_self', 'is_deleted']
    search_fields = ['title', 'description']
    filter_horizontal = ['tags']
    inlines = [TaskCommentInline]


@admin.register(SelfTaskMarker)
class SelfTaskMarkerAdmin(admin.ModelAdmin):
    list_display = ['account', 'task', 'created_at']
