"""
Accounts Admin - user management in the Django admin.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    ordering = ['-created_at']
    list_display = ['email', 'first_name', 'last_name', 'role', 'is_verified', 'is_certified', 'is_active']
    list_filter = ['role', 'is_verified', 'is_certified', 'is_active']
    search_fields = ['email', 'first_name', 'last_name', 'company']
    readonly_fields = ['created_at', 'updated_at', 'last_login', 'rating', 'completed_projects']

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        (_('Profile'), {'fields': ('first_name', 'last_name', 'phone', 'company', 'avatar')}),
        (_('Marketplace'), {'fields': ('role', 'is_verified', 'is_certified', 'trades', 'arrondissements', 'rating', 'completed_projects')}),
        (_('Bank details'), {'fields': ('iban', 'bic', 'account_holder')}),
        (_('Permissions'), {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        (_('Dates'), {'fields': ('last_login', 'created_at', 'updated_at')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'role', 'password1', 'password2'),
        }),
    )
