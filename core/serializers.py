"""
Shared serializer fields.
"""
from rest_framework import serializers


class MoneyField(serializers.DecimalField):
    """Decimal in, JSON number out."""

    def __init__(self, **kwargs):
        kwargs.setdefault('max_digits', 12)
        kwargs.setdefault('decimal_places', 2)
        super().__init__(**kwargs)

    def to_representation(self, value):
        if value is None:
            return None
        return float(super().to_representation(value))


class NullableMoneyField(MoneyField):
    """Accepts '' from forms as null."""

    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_null', True)
        super().__init__(**kwargs)

    def run_validation(self, data=serializers.empty):
        if data == '':
            data = None
        return super().run_validation(data)
