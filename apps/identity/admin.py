from django.contrib import admin
from .models import Account, Credential


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'mobile', 'role', 'is_active', 'created_by']
    list_filter = ['role', 'is_active']
    search_fields = ['name', 'email', 'mobile']


@admin.register(Credential)
class CredentialAdmin(admin.ModelAdmin):
    list_display = ['account', 'status', 'last_login', 'login_attempts']
    list_filter = ['status']
    exclude = ['password_hash', 'reset_token_hash']
