"""
Admin configuration for passbook app
"""
from django.contrib import admin
from .models import PassbookEntry


@admin.register(PassbookEntry)
class PassbookEntryAdmin(admin.ModelAdmin):
    list_display = ['customer_scheme', 'month', 'date', 'amount', 'chitti_amount', 'type', 'chit_lifting']
    list_filter = ['type', 'chit_lifting', 'payment_frequency']
    search_fields = ['customer_scheme__customer__name', 'customer_scheme__scheme__name']
    ordering = ['-date']

    def get_readonly_fields(self, request, obj=None):
        if obj is not None and obj.is_generated:
            return [f.name for f in self.model._meta.fields]
        return ['created_at', 'updated_at']

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.is_generated:
            return False
        return super().has_delete_permission(request, obj)
