"""
Django admin configuration for core models.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Administrator, Horse, Owner, Session, Stable, Vet


@admin.register(Stable)
class StableAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact', 'active', 'created_at']
    list_filter = ['active']
    search_fields = ['name', 'contact', 'address']
    readonly_fields = ['created_at']


@admin.register(Vet)
class VetAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'active']
    list_filter = ['active']
    search_fields = ['name', 'email', 'phone']
    readonly_fields = ['created_at']


@admin.register(Administrator)
class AdministratorAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'active']
    list_filter = ['active']
    search_fields = ['name', 'email']


@admin.register(Owner)
class OwnerAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact', 'stable', 'active_horse_count', 'created_at']
    list_filter = ['stable']
    search_fields = ['name', 'contact']
    readonly_fields = ['created_at']


@admin.register(Horse)
class HorseAdmin(admin.ModelAdmin):
    list_display = ['name', 'barn_name', 'owner', 'vet', 'active', 'updated_at']
    list_filter = ['active', 'owner__stable', 'vet']
    search_fields = ['name', 'barn_name', 'owner__name', 'notes']
    raw_id_fields = ['owner']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ['role', 'ref_id', 'created_at', 'expires_at', 'status_display']
    list_filter = ['role']
    readonly_fields = ['token', 'role', 'ref_id', 'created_at', 'expires_at']

    def status_display(self, obj):
        if obj.is_expired:
            return format_html('<span style="color: {};">{}</span>', 'red', 'Expired')
        return format_html('<span style="color: {};">{}</span>', 'green', 'Active')
    status_display.short_description = 'Status'

    def has_add_permission(self, request):
        # Sessions are only opened by logging in
        return False
