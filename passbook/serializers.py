"""
Serializers for passbook app
"""
from decimal import Decimal

from rest_framework import serializers

from core.serializers import MoneyField, NullableMoneyField
from .models import PassbookEntry

TYPE_CHOICES = [c[0] for c in PassbookEntry.TYPE_CHOICES]
LIFTING_CHOICES = [c[0] for c in PassbookEntry.LIFTING_CHOICES]
FREQUENCY_CHOICES = [c[0] for c in PassbookEntry.FREQUENCY_CHOICES]


class PassbookEntrySerializer(serializers.ModelSerializer):
    customerSchemeId = serializers.IntegerField(source='customer_scheme_id', read_only=True)
    customerId = serializers.IntegerField(source='customer_scheme.customer_id', read_only=True)
    schemeId = serializers.IntegerField(source='customer_scheme.scheme_id', read_only=True)
    schemeName = serializers.CharField(source='customer_scheme.scheme.name', read_only=True)
    dailyPayment = MoneyField(source='daily_payment', read_only=True)
    amount = MoneyField(read_only=True)
    chittiAmount = MoneyField(source='chitti_amount', read_only=True)
    chitLiftingAmount = MoneyField(source='chit_lifting_amount', read_only=True)
    chitLifting = serializers.CharField(source='chit_lifting', read_only=True)
    paymentMethod = serializers.CharField(source='payment_method', read_only=True)
    paymentFrequency = serializers.CharField(source='payment_frequency', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = PassbookEntry
        fields = [
            'id', 'customerSchemeId', 'customerId', 'schemeId', 'schemeName', 'month', 'date',
            'dailyPayment', 'amount', 'chittiAmount', 'chitLiftingAmount', 'chitLifting',
            'paymentMethod', 'paymentFrequency', 'type', 'createdAt', 'updatedAt',
        ]
        read_only_fields = ['month', 'date', 'type']


class PassbookEntryCreateSerializer(serializers.Serializer):
    """POST /api/passbook - manual entry; customerSchemeId or customerId identifies the enrollment."""
    customerSchemeId = serializers.IntegerField(source='customer_scheme_id', min_value=1, required=False, allow_null=True)
    customerId = serializers.IntegerField(source='customer_id', min_value=1, required=False, allow_null=True)
    month = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    dailyPayment = MoneyField(source='daily_payment', min_value=Decimal('0'))
    amount = MoneyField(min_value=Decimal('0'), default=Decimal('0'))
    chittiAmount = MoneyField(source='chitti_amount', min_value=Decimal('0'))
    chitLiftingAmount = NullableMoneyField(source='chit_lifting_amount', min_value=Decimal('0'))
    chitLifting = serializers.ChoiceField(
        source='chit_lifting', choices=LIFTING_CHOICES, default=PassbookEntry.LIFTING_NO,
    )
    paymentMethod = serializers.CharField(source='payment_method', max_length=20)
    paymentFrequency = serializers.ChoiceField(
        source='payment_frequency', choices=FREQUENCY_CHOICES, default=PassbookEntry.FREQUENCY_DAILY,
    )

    def validate(self, attrs):
        if attrs.get('customer_scheme_id') is None and attrs.get('customer_id') is None:
            raise serializers.ValidationError({'customerSchemeId': 'customerSchemeId or customerId is required'})
        return attrs


class PassbookEntryUpdateSerializer(serializers.Serializer):
    """PUT /api/passbook/{id} - manual entries only."""
    month = serializers.IntegerField(min_value=1, required=False)
    date = serializers.DateField(required=False)
    dailyPayment = MoneyField(source='daily_payment', min_value=Decimal('0'), required=False)
    amount = MoneyField(min_value=Decimal('0'), required=False)
    chittiAmount = MoneyField(source='chitti_amount', min_value=Decimal('0'), required=False)
    chitLiftingAmount = NullableMoneyField(source='chit_lifting_amount', min_value=Decimal('0'))
    chitLifting = serializers.ChoiceField(source='chit_lifting', choices=LIFTING_CHOICES, required=False)
    paymentMethod = serializers.CharField(source='payment_method', max_length=20, required=False)
    paymentFrequency = serializers.ChoiceField(source='payment_frequency', choices=FREQUENCY_CHOICES, required=False)
