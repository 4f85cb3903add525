"""
Collection (payment) models
"""
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from customers.models import Customer, CustomerScheme


class Collection(models.Model):
    """
    One payment event recorded by a collector.
    balance_remaining is supplied by the collector and becomes the enrollment balance.
    """
    METHOD_CASH = 'CASH'
    METHOD_BANK_TRANSFER = 'BANK_TRANSFER'
    METHOD_UPI = 'UPI'
    METHOD_CHEQUE = 'CHEQUE'
    METHOD_NOT_PAID = 'NOT_PAID'
    METHOD_CHOICES = [
        (METHOD_CASH, 'Cash'),
        (METHOD_BANK_TRANSFER, 'Bank Transfer'),
        (METHOD_UPI, 'UPI'),
        (METHOD_CHEQUE, 'Cheque'),
        (METHOD_NOT_PAID, 'Not Paid'),
    ]

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='collections')
    customer_scheme = models.ForeignKey(
        CustomerScheme,
        on_delete=models.CASCADE,
        related_name='collections',
    )
    collector = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='collections',
    )
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    date = models.DateField(db_index=True)
    balance_remaining = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    payment_method = models.CharField(max_length=20, choices=METHOD_CHOICES, default=METHOD_CASH)
    remarks = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'collections'
        verbose_name = 'Collection'
        verbose_name_plural = 'Collections'
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['customer', 'date'], name='collections_customer_date_idx'),
            models.Index(fields=['collector', 'date'], name='collections_collector_date_idx'),
        ]

    def __str__(self):
        return f"{self.customer_id} paid {self.amount_paid} on {self.date}"

    @property
    def is_paid(self):
        return self.amount_paid > 0
