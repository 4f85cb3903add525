"""
Serializers for ledger (collections) app
"""
from decimal import Decimal

from rest_framework import serializers

from core.serializers import MoneyField
from .models import Collection

METHOD_CHOICES = [c[0] for c in Collection.METHOD_CHOICES]


class CollectionSerializer(serializers.ModelSerializer):
    """Collection for API responses."""
    customerId = serializers.IntegerField(source='customer_id', read_only=True)
    customerName = serializers.CharField(source='customer.name', read_only=True)
    customerMobile = serializers.CharField(source='customer.mobile', read_only=True)
    customerSchemeId = serializers.IntegerField(source='customer_scheme_id', read_only=True)
    schemeId = serializers.IntegerField(source='customer_scheme.scheme_id', read_only=True)
    schemeName = serializers.CharField(source='customer_scheme.scheme.name', read_only=True)
    collectorId = serializers.IntegerField(source='collector_id', read_only=True)
    collectorName = serializers.CharField(source='collector.name', read_only=True)
    amountPaid = MoneyField(source='amount_paid', read_only=True)
    balanceRemaining = MoneyField(source='balance_remaining', read_only=True)
    paymentMethod = serializers.CharField(source='payment_method', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Collection
        fields = [
            'id', 'customerId', 'customerName', 'customerMobile', 'customerSchemeId', 'schemeId',
            'schemeName', 'collectorId', 'collectorName', 'amountPaid', 'date', 'balanceRemaining',
            'paymentMethod', 'remarks', 'createdAt', 'updatedAt',
        ]
        read_only_fields = ['date', 'remarks']


class CollectionCreateSerializer(serializers.Serializer):
    """POST /api/collections"""
    customerId = serializers.IntegerField(source='customer_id', min_value=1)
    customerSchemeId = serializers.IntegerField(source='customer_scheme_id', min_value=1, required=False, allow_null=True)
    amountPaid = MoneyField(source='amount_paid', min_value=Decimal('0'))
    date = serializers.DateField()
    balanceRemaining = MoneyField(source='balance_remaining', min_value=Decimal('0'))
    paymentMethod = serializers.ChoiceField(
        source='payment_method', choices=METHOD_CHOICES, default=Collection.METHOD_CASH,
    )
    remarks = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class CollectionUpdateSerializer(serializers.Serializer):
    """PUT /api/collections/{id}; customer and enrollment cannot change."""
    amountPaid = MoneyField(source='amount_paid', min_value=Decimal('0'), required=False)
    date = serializers.DateField(required=False)
    balanceRemaining = MoneyField(source='balance_remaining', min_value=Decimal('0'), required=False)
    paymentMethod = serializers.ChoiceField(source='payment_method', choices=METHOD_CHOICES, required=False)
    remarks = serializers.CharField(required=False, allow_blank=True, max_length=1000)
