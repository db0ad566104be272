from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'email', 'first_name', 'last_name', 'role', 'is_active', 'last_login_at')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'email', 'first_name', 'last_name')
    ordering = ('-created_at',)
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Restaurant', {'fields': ('role', 'phone', 'created_by', 'last_login_at')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Restaurant', {'fields': ('email', 'role', 'phone')}),
    )
