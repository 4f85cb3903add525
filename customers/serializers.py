"""
Serializers for customers app
"""
import re
from decimal import Decimal

from rest_framework import serializers

from core.serializers import MoneyField
from schemes.models import ChitScheme
from .models import Customer, CustomerScheme

# Indian mobile numbers: optional +91 / 0 prefix, ten digits starting with 6-9
MOBILE_RE = re.compile(r'^(?:\+91[\s-]?|0)?[6-9]\d{9}$')

STATUS_CHOICES = [c[0] for c in Customer.STATUS_CHOICES]
DURATION_TYPES = [c[0] for c in ChitScheme.DURATION_TYPE_CHOICES]


class EnrollmentSerializer(serializers.ModelSerializer):
    """An enrollment as seen from the customer side."""
    customerSchemeId = serializers.IntegerField(source='id', read_only=True)
    customerId = serializers.IntegerField(source='customer_id', read_only=True)
    schemeId = serializers.IntegerField(source='scheme_id', read_only=True)
    schemeName = serializers.CharField(source='scheme.name', read_only=True)
    schemeStatus = serializers.CharField(source='scheme.status', read_only=True)
    chitValue = MoneyField(source='scheme.chit_value', read_only=True)
    paymentType = serializers.CharField(source='scheme.payment_type', read_only=True)
    amountPerDay = MoneyField(source='amount_per_day', read_only=True)
    durationType = serializers.CharField(source='duration_type', read_only=True)
    startDate = serializers.DateField(source='start_date', read_only=True)
    lastDate = serializers.DateField(source='last_date', read_only=True)
    balance = MoneyField(read_only=True)
    totalAmount = MoneyField(source='contracted_amount', read_only=True)
    enrolledAt = serializers.DateTimeField(source='enrolled_at', read_only=True)

    class Meta:
        model = CustomerScheme
        fields = [
            'customerSchemeId', 'customerId', 'schemeId', 'schemeName', 'schemeStatus', 'chitValue',
            'paymentType', 'status', 'amountPerDay', 'duration', 'durationType', 'startDate',
            'lastDate', 'balance', 'totalAmount', 'enrolledAt',
        ]
        read_only_fields = ['status', 'duration']


class CustomerSerializer(serializers.ModelSerializer):
    """Customer with its enrollments."""
    name = serializers.CharField(min_length=2, max_length=255)
    address = serializers.CharField(min_length=10)
    photo = serializers.CharField(max_length=500, required=False, allow_null=True, allow_blank=True)
    documents = serializers.ListField(child=serializers.CharField(max_length=500), required=False)
    status = serializers.ChoiceField(choices=STATUS_CHOICES, default=Customer.STATUS_ACTIVE)
    lastDate = serializers.DateField(source='last_date', required=False, allow_null=True)
    schemes = EnrollmentSerializer(source='enrollments', many=True, read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'mobile', 'address', 'photo', 'documents', 'status', 'lastDate',
            'schemes', 'createdAt', 'updatedAt',
        ]

    def validate_mobile(self, value):
        value = value.strip()
        if not MOBILE_RE.match(value):
            raise serializers.ValidationError('Enter a valid Indian mobile number')
        return value


class EnrollmentCreateSerializer(serializers.Serializer):
    """POST /customers/{id}/schemes"""
    schemeId = serializers.IntegerField(source='scheme_id', min_value=1)
    amountPerDay = MoneyField(source='amount_per_day', min_value=Decimal('1'))
    duration = serializers.IntegerField(min_value=1)
    durationType = serializers.ChoiceField(
        source='duration_type', choices=DURATION_TYPES, default=ChitScheme.DURATION_MONTHS,
    )
    startDate = serializers.DateField(source='start_date', required=False, allow_null=True)
    lastDate = serializers.DateField(source='last_date', required=False, allow_null=True)


class CustomerCreateSerializer(CustomerSerializer):
    """
    Customer fields plus the optional first enrollment.
    When schemeId is present amountPerDay and duration are required.
    """
    schemeId = serializers.IntegerField(min_value=1, required=False, write_only=True)
    amountPerDay = MoneyField(min_value=Decimal('1'), required=False, write_only=True)
    duration = serializers.IntegerField(min_value=1, required=False, write_only=True)
    durationType = serializers.ChoiceField(
        choices=DURATION_TYPES, default=ChitScheme.DURATION_MONTHS, write_only=True,
    )
    startDate = serializers.DateField(required=False, allow_null=True, write_only=True)

    class Meta(CustomerSerializer.Meta):
        fields = CustomerSerializer.Meta.fields + [
            'schemeId', 'amountPerDay', 'duration', 'durationType', 'startDate',
        ]

    def validate(self, attrs):
        if attrs.get('schemeId') is not None:
            missing = {
                key: 'This field is required when schemeId is given'
                for key in ('amountPerDay', 'duration')
                if attrs.get(key) is None
            }
            if missing:
                raise serializers.ValidationError(missing)
        return attrs

    def split(self):
        """(customer_fields, enrollment_data or None) from validated data."""
        data = dict(self.validated_data)
        scheme_id = data.pop('schemeId', None)
        enrollment = {
            'amount_per_day': data.pop('amountPerDay', None),
            'duration': data.pop('duration', None),
            'duration_type': data.pop('durationType', ChitScheme.DURATION_MONTHS),
            'start_date': data.pop('startDate', None),
            'last_date': data.get('last_date'),
        }
        if scheme_id is None:
            return data, None
        enrollment['scheme_id'] = scheme_id
        return data, enrollment


class EnrollmentUpdateSerializer(serializers.Serializer):
    """PATCH /customers/schemes/{id}: status and terms."""
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False)
    amountPerDay = MoneyField(source='amount_per_day', min_value=Decimal('1'), required=False)
    duration = serializers.IntegerField(min_value=1, required=False)
    durationType = serializers.ChoiceField(source='duration_type', choices=DURATION_TYPES, required=False)
    startDate = serializers.DateField(source='start_date', required=False)
    lastDate = serializers.DateField(source='last_date', required=False, allow_null=True)
