from django.contrib import admin
from .models import Status, Tag


@admin.register(Tag)
class TagAdmin(admin.ModelAdmin):
    list_display = ['label', 'type', 'color']
    list_filter = ['type']
    search_fields = ['label']


@admin.register(Status)
class StatusAdmin(admin.ModelAdmin):
    list_display = ['name', 'color']
    search_fields = ['name']
