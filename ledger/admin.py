"""
Admin configuration for ledger app
"""
from django.contrib import admin
from .models import Collection


@admin.register(Collection)
class CollectionAdmin(admin.ModelAdmin):
    """Read-only: balance side effects go through ledger.services."""
    list_display = ['customer', 'customer_scheme', 'amount_paid', 'balance_remaining', 'payment_method', 'date', 'collector']
    list_filter = ['payment_method', 'date']
    search_fields = ['customer__name', 'customer__mobile', 'remarks']
    ordering = ['-date']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
