"""
Admin configuration for schemes app
"""
from django.contrib import admin
from .models import ChitScheme


@admin.register(ChitScheme)
class ChitSchemeAdmin(admin.ModelAdmin):
    list_display = ['name', 'chit_value', 'duration', 'duration_type', 'members_enrolled', 'number_of_members', 'status']
    list_filter = ['status', 'payment_type', 'duration_type']
    search_fields = ['name', 'auction_rules']
    readonly_fields = ['members_enrolled', 'end_date', 'created_at', 'updated_at']
