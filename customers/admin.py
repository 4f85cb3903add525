"""
Admin configuration for customers app
Enrollments are created and removed through customers.services only (members_enrolled counter).
"""
from django.contrib import admin
from .models import Customer, CustomerScheme


class CustomerSchemeInline(admin.TabularInline):
    model = CustomerScheme
    extra = 0
    max_num = 0
    can_delete = False
    readonly_fields = ['scheme', 'enrolled_at', 'amount_per_day', 'duration', 'balance']


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'mobile', 'status', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['name', 'mobile', 'address']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [CustomerSchemeInline]


@admin.register(CustomerScheme)
class CustomerSchemeAdmin(admin.ModelAdmin):
    list_display = ['customer', 'scheme', 'status', 'amount_per_day', 'duration', 'balance', 'enrolled_at']
    list_filter = ['status', 'scheme']
    search_fields = ['customer__name', 'customer__mobile', 'scheme__name']
    readonly_fields = ['customer', 'scheme', 'enrolled_at', 'balance']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
