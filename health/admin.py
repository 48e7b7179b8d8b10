"""
Django admin configuration for health models.
"""

from django.contrib import admin
from django.utils.html import format_html

from . import staleness
from .models import Treatment, TreatmentType

STALENESS_STYLES = {
    staleness.OVERDUE: ('red', 'Overdue'),
    staleness.DUE_SOON: ('orange', 'Due Soon'),
    staleness.RECENT: ('green', 'Recent'),
    staleness.NEUTRAL: ('inherit', 'OK'),
    staleness.BLANK: ('gray', 'Never'),
}


@admin.register(TreatmentType)
class TreatmentTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'sort_order', 'color']
    list_filter = ['category']
    search_fields = ['name']
    ordering = ['sort_order']


@admin.register(Treatment)
class TreatmentAdmin(admin.ModelAdmin):
    list_display = ['horse', 'treatment_type', 'treatment_date', 'status_display', 'updated_at']
    list_filter = ['treatment_type__category', 'treatment_type']
    search_fields = ['horse__name', 'horse__barn_name', 'notes']
    date_hierarchy = 'treatment_date'
    raw_id_fields = ['horse']
    readonly_fields = ['created_at', 'updated_at']
    list_select_related = ['horse', 'treatment_type']

    def status_display(self, obj):
        color, label = STALENESS_STYLES[obj.staleness]
        return format_html('<span style="color: {};">{}</span>', color, label)
    status_display.short_description = 'Status'
