"""
Serializers for schemes app
"""
from decimal import Decimal

from rest_framework import serializers

from core.serializers import MoneyField, NullableMoneyField
from .models import ChitScheme


class ChitSchemeSerializer(serializers.ModelSerializer):
    """Read and write shape of a chit scheme (camelCase API fields)."""
    name = serializers.CharField(min_length=3, max_length=255)
    chitValue = MoneyField(source='chit_value', min_value=Decimal('1000'))
    duration = serializers.IntegerField(min_value=1)
    durationType = serializers.ChoiceField(
        source='duration_type', choices=[c[0] for c in ChitScheme.DURATION_TYPE_CHOICES],
        default=ChitScheme.DURATION_MONTHS,
    )
    paymentType = serializers.ChoiceField(
        source='payment_type', choices=[c[0] for c in ChitScheme.PAYMENT_TYPE_CHOICES],
        default=ChitScheme.PAYMENT_DAILY,
    )
    dailyPayment = NullableMoneyField(source='daily_payment', min_value=Decimal('1'))
    monthlyPayment = NullableMoneyField(source='monthly_payment', min_value=Decimal('1'))
    numberOfMembers = serializers.IntegerField(source='number_of_members', min_value=2)
    membersEnrolled = serializers.IntegerField(source='members_enrolled', read_only=True)
    auctionRules = serializers.CharField(source='auction_rules', required=False, allow_blank=True)
    status = serializers.ChoiceField(
        choices=[c[0] for c in ChitScheme.STATUS_CHOICES], default=ChitScheme.STATUS_ACTIVE,
    )
    startDate = serializers.DateField(source='start_date')
    endDate = serializers.DateField(source='end_date', read_only=True)
    lastDate = serializers.DateField(source='last_date', required=False, allow_null=True)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    commissionRate = serializers.DecimalField(
        source='commission_rate', max_digits=5, decimal_places=4, min_value=Decimal('0'), max_value=Decimal('1'),
        required=False, allow_null=True, coerce_to_string=False,
    )
    penaltyRate = serializers.DecimalField(
        source='penalty_rate', max_digits=5, decimal_places=4, min_value=Decimal('0'), max_value=Decimal('1'),
        required=False, allow_null=True, coerce_to_string=False,
    )
    minBidAmount = NullableMoneyField(source='min_bid_amount', min_value=Decimal('0'))
    maxBidAmount = NullableMoneyField(source='max_bid_amount', min_value=Decimal('0'))
    isActive = serializers.BooleanField(source='is_active', required=False)
    createdById = serializers.IntegerField(source='created_by_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = ChitScheme
        fields = [
            'id', 'name', 'chitValue', 'duration', 'durationType', 'paymentType',
            'dailyPayment', 'monthlyPayment', 'numberOfMembers', 'membersEnrolled',
            'auctionRules', 'status', 'startDate', 'endDate', 'lastDate', 'description',
            'commissionRate', 'penaltyRate', 'minBidAmount', 'maxBidAmount', 'isActive',
            'createdById', 'createdAt', 'updatedAt',
        ]

    def validate(self, attrs):
        def current(field):
            if field in attrs:
                return attrs[field]
            return getattr(self.instance, field, None) if self.instance else None

        payment_type = current('payment_type') or ChitScheme.PAYMENT_DAILY
        if payment_type == ChitScheme.PAYMENT_DAILY and current('daily_payment') is None:
            raise serializers.ValidationError({'dailyPayment': 'Daily payment is required for DAILY schemes'})
        if payment_type == ChitScheme.PAYMENT_MONTHLY and current('monthly_payment') is None:
            raise serializers.ValidationError({'monthlyPayment': 'Monthly payment is required for MONTHLY schemes'})

        min_bid, max_bid = current('min_bid_amount'), current('max_bid_amount')
        if min_bid is not None and max_bid is not None and min_bid > max_bid:
            raise serializers.ValidationError({'maxBidAmount': 'Must not be lower than minBidAmount'})

        if self.instance is not None and 'number_of_members' in attrs:
            if attrs['number_of_members'] < self.instance.members_enrolled:
                raise serializers.ValidationError({
                    'numberOfMembers': f'Cannot be lower than the {self.instance.members_enrolled} members already enrolled',
                })
        return attrs

    def to_representation(self, instance):
        data = super().to_representation(instance)
        for key in ('commissionRate', 'penaltyRate'):
            if data.get(key) is not None:
                data[key] = float(data[key])
        return data


class ChitSchemeListSerializer(ChitSchemeSerializer):
    """List rows carry enrollment and auction counts (annotated by the view)."""

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['_count'] = {
            'customers': getattr(instance, 'customer_count', 0),
            'auctions': getattr(instance, 'auction_count', 0),
        }
        return data
