"""
Serializers for auctions app
"""
from decimal import Decimal

from rest_framework import serializers

from core.serializers import MoneyField, NullableMoneyField
from .models import Auction

STATUS_CHOICES = [c[0] for c in Auction.STATUS_CHOICES]


class AuctionSerializer(serializers.ModelSerializer):
    chitSchemeId = serializers.IntegerField(source='chit_scheme_id', read_only=True)
    chitSchemeName = serializers.CharField(source='chit_scheme.name', read_only=True)
    auctionDate = serializers.DateField(source='auction_date', read_only=True)
    winningMemberId = serializers.IntegerField(source='winning_member_id', read_only=True)
    winningMemberName = serializers.CharField(source='winning_member.name', read_only=True, default=None)
    amountReceived = MoneyField(source='amount_received', read_only=True)
    discountAmount = MoneyField(source='discount_amount', read_only=True)
    newDailyPayment = MoneyField(source='new_daily_payment', read_only=True)
    previousDailyPayment = MoneyField(source='previous_daily_payment', read_only=True)
    propagatedAt = serializers.DateTimeField(source='propagated_at', read_only=True)
    createdById = serializers.IntegerField(source='created_by_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Auction
        fields = [
            'id', 'chitSchemeId', 'chitSchemeName', 'auctionDate', 'winningMemberId', 'winningMemberName',
            'amountReceived', 'discountAmount', 'newDailyPayment', 'previousDailyPayment', 'status',
            'remarks', 'propagatedAt', 'createdById', 'createdAt', 'updatedAt',
        ]
        read_only_fields = ['status', 'remarks']


class _AuctionInputSerializer(serializers.Serializer):
    winningMemberId = serializers.IntegerField(source='winning_member_id', min_value=1, required=False, allow_null=True)
    amountReceived = NullableMoneyField(source='amount_received', min_value=Decimal('0'))
    discountAmount = NullableMoneyField(source='discount_amount', min_value=Decimal('0'))
    newDailyPayment = NullableMoneyField(source='new_daily_payment', min_value=Decimal('1'))
    previousDailyPayment = NullableMoneyField(source='previous_daily_payment', min_value=Decimal('1'))
    remarks = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def validate(self, attrs):
        # Blank amounts mean "nothing received yet"
        for field in ('amount_received', 'discount_amount'):
            if field in attrs and attrs[field] is None:
                attrs[field] = Decimal('0')
        return attrs


class AuctionCreateSerializer(_AuctionInputSerializer):
    """POST /api/auctions"""
    chitSchemeId = serializers.IntegerField(source='scheme_id', min_value=1)
    auctionDate = serializers.DateField(source='auction_date')
    status = serializers.ChoiceField(choices=STATUS_CHOICES, default=Auction.STATUS_SCHEDULED)


class AuctionUpdateSerializer(_AuctionInputSerializer):
    """PUT /api/auctions/{id}; chitSchemeId is not accepted."""
    auctionDate = serializers.DateField(source='auction_date', required=False)
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False)

    def validate(self, attrs):
        if 'chitSchemeId' in self.initial_data:
            raise serializers.ValidationError({'chitSchemeId': 'Chit scheme of an auction cannot be changed'})
        return super().validate(attrs)
